"""Basic usage example for pyheatzy library."""

import asyncio

from pyheatzy import HeatzyClient


async def main() -> None:
    """Demonstrate basic usage of pyheatzy."""
    # Uses $HEATZY_CONFIG or ~/.heatzy.conf, created with `pyheatzy init`
    async with HeatzyClient() as client:
        ids = await client.sync()
        print(f"Found {len(ids)} device(s)")

        for record in client.list_devices():
            print(f"\nDevice: {record.alias}")
            print(f"  ID: {record.did}")
            print(f"  Product: {record.product}")
            print(f"  MAC: {record.mac}")
            print(f"  State: {await client.get_state(record.did)}")

        if ids:
            print("\nSetting first device to eco...")
            print(f"Now: {await client.set_state(ids[0], 'eco')}")


if __name__ == "__main__":
    asyncio.run(main())
