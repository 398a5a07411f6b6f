"""Local registry of the devices bound to the account."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pyheatzy.exceptions import UnknownDeviceError
from pyheatzy.models import DeviceRecord


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from pyheatzy.store import ConfigStore

_LOGGER = logging.getLogger(__name__)

FIELD_SEPARATOR = ";"


def format_device_line(record: DeviceRecord) -> str:
    """Format a record as a ``did=product;mac;alias`` store line.

    Line breaks in the alias would split the record, so they become spaces.
    """
    alias = " ".join(record.alias.splitlines())
    return f"{record.did}={record.product}{FIELD_SEPARATOR}{record.mac}{FIELD_SEPARATOR}{alias}"


def parse_device_line(line: str) -> DeviceRecord | None:
    """Parse a store line into a record, or None if it is not a device line.

    The alias is the last field and may itself contain the separator. The MAC
    address and alias are kept exactly as written.
    """
    did, sep, rest = line.rstrip("\r\n").partition("=")
    did = did.strip()
    if not sep or not did:
        return None

    fields = rest.split(FIELD_SEPARATOR, 2)
    product = fields[0].strip()
    if not product:
        return None

    fields += [""] * (3 - len(fields))
    return DeviceRecord(did=did, product=product, mac=fields[1], alias=fields[2])


class DeviceRegistry:
    """Mapping from device identifier to DeviceRecord, backed by the store.

    The registry is loaded lazily on first access and only ever replaced as a
    whole by ``rebuild``.

    Example:
        ```python
        registry = DeviceRegistry(ConfigStore("~/.heatzy.conf"))
        record = registry.lookup("did123")
        print(record.product, record.mac)
        ```
    """

    def __init__(self, store: ConfigStore) -> None:
        self._store = store
        self._devices: dict[str, DeviceRecord] | None = None

    def load(self) -> dict[str, DeviceRecord]:
        """Read the device section of the store.

        Returns:
            Mapping of device identifier to record. Empty when the section is
            absent or empty.

        Raises:
            ConfigMissingError: If the store file does not exist.
        """
        _, text = self._store.read()
        devices: dict[str, DeviceRecord] = {}

        for line in text.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            record = parse_device_line(line)
            if record is None:
                _LOGGER.warning("Skipping malformed device line in %s: %r", self._store.path, line)
                continue
            devices[record.did] = record

        self._devices = devices
        return dict(devices)

    @property
    def devices(self) -> dict[str, DeviceRecord]:
        if self._devices is None:
            self.load()
        assert self._devices is not None
        return self._devices

    @property
    def identifiers(self) -> list[str]:
        """Known device identifiers in store order."""
        return list(self.devices)

    def lookup(self, did: str) -> DeviceRecord:
        """Return the record of a device.

        Raises:
            UnknownDeviceError: If the identifier is not registered.
        """
        try:
            return self.devices[did]
        except KeyError:
            msg = f"Unknown device '{did}' (run sync to refresh the device list)"
            raise UnknownDeviceError(msg, device_id=did) from None

    def rebuild(self, records: Iterable[DeviceRecord]) -> list[str]:
        """Replace the whole registry with freshly fetched records.

        Devices absent from ``records`` are dropped. When an identifier
        appears twice the later record wins.

        Returns:
            Identifiers in the order first encountered.
        """
        devices: dict[str, DeviceRecord] = {}
        for record in records:
            devices[record.did] = record

        self._store.write_devices([format_device_line(record) for record in devices.values()])
        self._devices = devices
        _LOGGER.info("Device registry rebuilt with %d device(s)", len(devices))
        return list(devices)

    def __contains__(self, did: object) -> bool:
        return did in self.devices

    def __iter__(self) -> Iterator[DeviceRecord]:
        return iter(list(self.devices.values()))

    def __len__(self) -> int:
        return len(self.devices)
