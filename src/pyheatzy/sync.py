"""Rebuild the local device registry from the cloud binding listing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pyheatzy.exceptions import DeviceError
from pyheatzy.serializers import deserialize_bindings, error_message, is_error_response


if TYPE_CHECKING:
    from pyheatzy.api import HeatzyAPI
    from pyheatzy.registry import DeviceRegistry

_LOGGER = logging.getLogger(__name__)


async def sync_devices(api: HeatzyAPI, registry: DeviceRegistry) -> list[str]:
    """Replace the registry with the devices currently bound to the account.

    The listing is fully parsed before anything is written, so a failed or
    malformed response leaves the registry as it was.

    Args:
        api: Dispatcher used to fetch the binding listing.
        registry: Registry to rebuild.

    Returns:
        Device identifiers in the order of the cloud response.

    Raises:
        DeviceError: If the cloud refuses the listing.
        MalformedResponseError: If the listing lacks devices or device identities.
    """
    status, data = await api.get_bindings()

    if is_error_response(status, data):
        msg = f"Failed to get devices: {error_message(status, data)}"
        raise DeviceError(msg)

    records = deserialize_bindings(data)
    for record in records:
        _LOGGER.debug("Found %s device %s (%s, %s)", record.product, record.did, record.mac, record.alias)

    return registry.rebuild(records)
