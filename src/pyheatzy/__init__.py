"""Python client library for Heatzy pilot-wire heating controllers.

This package provides an async client and a command-line tool for Heatzy
devices controlled through the Heatzy (Gizwits) cloud.

The library is organized into layers:
1. **Store Layer** (pyheatzy.store, pyheatzy.registry): Credentials and device registry
   persisted in one human-editable file
2. **API Layer** (pyheatzy.auth, pyheatzy.api): Login and the command dispatcher that
   reauthenticates once when the cloud rejects a token
3. **State Layer** (pyheatzy.states): Translation between abstract heating states and
   each product family's wire tokens
4. **Client Layer** (pyheatzy.client): The operations offered by the command line

Example:
    ```python
    from pyheatzy import HeatzyClient

    async with HeatzyClient() as client:
        await client.sync()
        print(await client.get_state("did123"))
        await client.set_state("did123", "comfort")
    ```
"""

from __future__ import annotations

from pyheatzy.api import HeatzyAPI
from pyheatzy.auth import SessionManager
from pyheatzy.client import HeatzyClient
from pyheatzy.exceptions import (
    AppIdMissingError,
    AuthenticationError,
    ConfigMissingError,
    CredentialsMissingError,
    DeviceError,
    HeatzyConnectionError,
    HeatzyError,
    HeatzyTimeoutError,
    MalformedResponseError,
    UnknownActionError,
    UnknownDeviceError,
    UnknownStateError,
    UnknownWireTokenError,
    UnsupportedProductError,
)
from pyheatzy.models import Credentials, DeviceRecord, DeviceStatus, LoginResponse
from pyheatzy.registry import DeviceRegistry
from pyheatzy.states import PROTOCOLS, build_payload, decode, encode, list_states
from pyheatzy.store import ConfigStore, CredentialStore
from pyheatzy.sync import sync_devices


__version__ = "0.1.0"

__all__ = [
    "PROTOCOLS",
    "AppIdMissingError",
    "AuthenticationError",
    "ConfigMissingError",
    "ConfigStore",
    "CredentialStore",
    "Credentials",
    "CredentialsMissingError",
    "DeviceError",
    "DeviceRecord",
    "DeviceRegistry",
    "DeviceStatus",
    "HeatzyAPI",
    "HeatzyClient",
    "HeatzyConnectionError",
    "HeatzyError",
    "HeatzyTimeoutError",
    "LoginResponse",
    "MalformedResponseError",
    "SessionManager",
    "UnknownActionError",
    "UnknownDeviceError",
    "UnknownStateError",
    "UnknownWireTokenError",
    "UnsupportedProductError",
    "__version__",
    "build_payload",
    "decode",
    "encode",
    "list_states",
    "sync_devices",
]
