"""High-level operations on the Heatzy devices of one account.

This module ties the persisted store, the session manager, the command
dispatcher and the state translator together into the operations offered
by the command line.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import ClientSession  # noqa: TC002 - Used at runtime

from pyheatzy.api import HeatzyAPI
from pyheatzy.auth import SessionManager
from pyheatzy.const import DEFAULT_BASE_URL, STATE_OFFLINE, STATE_UNKNOWN
from pyheatzy.exceptions import DeviceError, MalformedResponseError, UnknownWireTokenError
from pyheatzy.registry import DeviceRegistry
from pyheatzy.serializers import deserialize_device_status, deserialize_mode, error_message, is_error_response
from pyheatzy.states import get_protocol, list_states
from pyheatzy.store import ConfigStore, CredentialStore
from pyheatzy.sync import sync_devices


if TYPE_CHECKING:
    import os
    from types import TracebackType

    from pyheatzy.models import DeviceRecord

_LOGGER = logging.getLogger(__name__)


class HeatzyClient:
    """Device manager for the Heatzy devices bound to an account.

    Local lookups (product, MAC address, alias, device list) only read the
    store. Remote operations load the credentials on first use and go through
    a HeatzyAPI dispatcher, which logs in again at most once per request when
    the stored token has expired.

    Example:
        ```python
        from pyheatzy import HeatzyClient

        async with HeatzyClient("~/.heatzy.conf") as client:
            await client.sync()
            for record in client.list_devices():
                print(record.did, await client.get_state(record.did))

            await client.set_state("did123", "eco")
        ```

    Attributes:
        registry: Local device registry.
    """

    def __init__(
        self,
        config_path: str | os.PathLike[str] | None = None,
        *,
        login: str | None = None,
        password: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        session: ClientSession | None = None,
    ) -> None:
        """Initialize the Heatzy client.

        Args:
            config_path: Store file location. Defaults to $HEATZY_CONFIG or ~/.heatzy.conf.
            login: Explicit login overriding the stored one.
            password: Explicit password overriding the stored one.
            base_url: Base URL for the API. Defaults to the Heatzy EU cloud.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
        """
        self._store = ConfigStore(config_path)
        self._credential_store = CredentialStore(self._store)
        self.registry = DeviceRegistry(self._store)

        self._login = login
        self._password = password
        self._base_url = base_url
        self._session = session
        self._owns_session = session is None
        self._api: HeatzyAPI | None = None

    async def __aenter__(self) -> HeatzyClient:
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()

    @property
    def api(self) -> HeatzyAPI:
        """Get the command dispatcher, loading the credentials on first use.

        Raises:
            ConfigMissingError: If the store file does not exist.
            AppIdMissingError: If the store has no application id.
            CredentialsMissingError: If no login/password is available.
        """
        if self._api is None:
            if self._session is None:
                msg = "Session not initialized. Use 'async with' or provide a session."
                raise RuntimeError(msg)

            credentials = self._credential_store.load(login=self._login, password=self._password)
            manager = SessionManager(
                credentials,
                self._credential_store,
                self._base_url,
                session=self._session,
            )
            self._api = HeatzyAPI(session_manager=manager, session=self._session, base_url=self._base_url)
        return self._api

    # -------------------------------------------------------------------------
    # Local Operations
    # -------------------------------------------------------------------------

    @staticmethod
    def list_states() -> tuple[str, ...]:
        """Return the abstract states accepted by set_state."""
        return list_states()

    def list_devices(self) -> list[DeviceRecord]:
        """Return the registered devices in store order."""
        return list(self.registry)

    def get_device(self, did: str) -> DeviceRecord:
        """Return the registry record of a device."""
        return self.registry.lookup(did)

    def get_product(self, did: str) -> str:
        return self.registry.lookup(did).product

    def get_mac(self, did: str) -> str:
        return self.registry.lookup(did).mac

    def get_alias(self, did: str) -> str:
        return self.registry.lookup(did).alias

    # -------------------------------------------------------------------------
    # Remote Operations
    # -------------------------------------------------------------------------

    async def sync(self) -> list[str]:
        """Rebuild the device registry from the cloud.

        Returns:
            Device identifiers in the order of the cloud listing.
        """
        return await sync_devices(self.api, self.registry)

    async def get_state(self, did: str) -> str:
        """Get the current abstract state of a device.

        An offline device is reported as "offline" without reading its mode.
        A mode that is missing or outside the product's table is reported as
        "unknown".

        Raises:
            UnknownDeviceError: If the device is not registered (no request is made).
            UnsupportedProductError: If the device's product has no state table.
            DeviceError: If the cloud refuses the status or data request.
        """
        record = self.registry.lookup(did)
        protocol = get_protocol(record.product)

        status, data = await self.api.get_device(did)
        if is_error_response(status, data):
            msg = f"Failed to get status of device {did}: {error_message(status, data)}"
            raise DeviceError(msg, device_id=did)

        if not deserialize_device_status(did, data).online:
            _LOGGER.debug("Device %s is offline", did)
            return STATE_OFFLINE

        status, data = await self.api.get_latest_data(did)
        if is_error_response(status, data):
            msg = f"Failed to get data of device {did}: {error_message(status, data)}"
            raise DeviceError(msg, device_id=did)

        try:
            return protocol.decode(deserialize_mode(did, data))
        except (MalformedResponseError, UnknownWireTokenError) as exc:
            _LOGGER.warning("Cannot read state of device %s: %s", did, exc)
            return STATE_UNKNOWN

    async def set_state(self, did: str, state: str) -> str:
        """Set the abstract state of a device.

        Returns:
            The abstract state carried by the transmitted command.

        Raises:
            UnknownDeviceError: If the device is not registered.
            UnsupportedProductError: If the device's product has no state table.
            UnknownStateError: If the state is not one of the abstract states.
            DeviceError: If the cloud refuses the command.
        """
        record = self.registry.lookup(did)
        protocol = get_protocol(record.product)
        token = protocol.encode(state)
        payload = protocol.payload(token)

        _LOGGER.debug("Setting %s device %s to %s with %s", record.product, did, state, payload)
        status, data = await self.api.control_device(did, payload)

        if is_error_response(status, data):
            msg = f"Failed to set state of device {did}: {error_message(status, data)}"
            raise DeviceError(msg, device_id=did)

        return protocol.decode(token)
