"""Data models for the Heatzy cloud and the local store."""

from __future__ import annotations

from dataclasses import dataclass

from pyheatzy.const import TOKEN_NULL


__all__ = [
    "Credentials",
    "DeviceRecord",
    "DeviceStatus",
    "LoginResponse",
]


@dataclass
class Credentials:
    """Account credentials and the bearer token issued for them.

    Attributes:
        login: Account login (email address).
        password: Account password.
        appid: Application id sent with every request.
        token: Bearer token, or "null" before the first login.
        expiry: Display form of the token expiration (advisory only).
    """

    login: str
    password: str
    appid: str
    token: str = TOKEN_NULL
    expiry: str = ""

    @property
    def has_token(self) -> bool:
        """Check if a token has been issued."""
        return bool(self.token) and self.token != TOKEN_NULL


@dataclass(frozen=True)
class DeviceRecord:
    """A device known to the local registry.

    Attributes:
        did: Device identifier assigned by the cloud.
        product: Product family name (selects the state table).
        mac: Hardware address.
        alias: Display name chosen by the user.
    """

    did: str
    product: str
    mac: str = ""
    alias: str = ""


@dataclass
class LoginResponse:
    """Response from the login endpoint.

    Attributes:
        token: Bearer token for API requests.
        uid: Cloud user id.
        expire_at: Token expiration as epoch seconds.
    """

    token: str
    uid: str
    expire_at: int


@dataclass
class DeviceStatus:
    """Device connectivity status.

    Attributes:
        did: Device identifier.
        online: Whether the device is connected to the cloud.
    """

    did: str
    online: bool
