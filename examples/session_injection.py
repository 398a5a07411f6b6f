"""Example of sharing one aiohttp session with pyheatzy."""

import asyncio

from aiohttp import ClientSession

from pyheatzy import HeatzyClient


async def main() -> None:
    """Read every device state through a caller-owned session."""
    async with ClientSession() as session:
        # The client does not close an injected session
        async with HeatzyClient(login="your@email.com", password="your_password", session=session) as client:
            for did in client.registry.identifiers:
                print(did, await client.get_state(did))


if __name__ == "__main__":
    asyncio.run(main())
