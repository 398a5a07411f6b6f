"""Deserialization of Heatzy cloud responses.

Stateless functions converting raw JSON bodies into data models. Every
function raises MalformedResponseError when a field it needs is absent, so
callers never deal with KeyError or surprise None values.

Error bodies from the cloud look like::

    {"error_code": 9004, "error_message": "token invalid!", "detail_message": null}
"""

from __future__ import annotations

from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any

from pyheatzy.const import EXPIRY_FORMAT, TOKEN_ERROR_CODES
from pyheatzy.exceptions import MalformedResponseError
from pyheatzy.models import DeviceRecord, DeviceStatus, LoginResponse


def is_error_response(status: int, data: dict[str, Any] | None) -> bool:
    """Check if a response reports a failure, by status or by body."""
    if status >= HTTPStatus.BAD_REQUEST:
        return True
    return bool(data) and ("error_code" in data or "error_message" in data)


def error_message(status: int, data: dict[str, Any] | None) -> str:
    """Return the most descriptive error text a response offers."""
    if data:
        for key in ("error_message", "detail_message"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {status}"


def is_token_error(status: int, data: dict[str, Any] | None) -> bool:
    """Check if a response rejects the bearer token.

    The structured ``error_code`` is checked first. Bodies without a code
    fall back to looking for "token" in the error message.
    """
    if not data or not is_error_response(status, data):
        return False

    code = data.get("error_code")
    if code is not None:
        try:
            return int(code) in TOKEN_ERROR_CODES
        except (TypeError, ValueError):
            pass

    return "token" in error_message(status, data).lower()


def format_expiry(expire_at: int) -> str:
    """Convert an epoch expiry into its stored display form (UTC).

    Example:
        >>> format_expiry(1735689600)
        '2025-01-01 00:00:00'
    """
    return datetime.fromtimestamp(expire_at, UTC).strftime(EXPIRY_FORMAT)


def deserialize_login(data: dict[str, Any] | None) -> LoginResponse:
    """Deserialize a successful /login response.

    Args:
        data: Raw body in format {"token": str, "uid": str, "expire_at": int}.

    Raises:
        MalformedResponseError: If the token or expiry is missing.
    """
    data = data or {}
    token = data.get("token")
    if not token:
        msg = "Missing token in login response"
        raise MalformedResponseError(msg)

    try:
        expire_at = int(data["expire_at"])
    except (KeyError, TypeError, ValueError):
        msg = "Missing or invalid expire_at in login response"
        raise MalformedResponseError(msg) from None

    return LoginResponse(token=str(token), uid=str(data.get("uid", "")), expire_at=expire_at)


def deserialize_bindings(data: dict[str, Any] | None) -> list[DeviceRecord]:
    """Deserialize the /bindings device listing.

    Args:
        data: Raw body in format
              {"devices": [{"did": str, "product_name": str, "mac": str, "dev_alias": str}, ...]}

    Returns:
        Records in response order.

    Raises:
        MalformedResponseError: If the listing or a device identity is missing.
    """
    devices = (data or {}).get("devices")
    if not isinstance(devices, list):
        msg = "Missing devices list in bindings response"
        raise MalformedResponseError(msg)

    records: list[DeviceRecord] = []
    for device in devices:
        did = device.get("did") if isinstance(device, dict) else None
        product = device.get("product_name") if isinstance(device, dict) else None
        if not did or not product:
            msg = f"Device without did/product_name in bindings response: {device!r}"
            raise MalformedResponseError(msg)

        records.append(
            DeviceRecord(
                did=str(did),
                product=str(product),
                mac=str(device.get("mac") or ""),
                alias=str(device.get("dev_alias") or ""),
            )
        )
    return records


def deserialize_device_status(did: str, data: dict[str, Any] | None) -> DeviceStatus:
    """Deserialize the /devices/{did} response.

    Args:
        did: Device identifier.
        data: Raw body in format {"did": str, "is_online": bool, ...}.

    Raises:
        MalformedResponseError: If the online flag is missing.
    """
    if not data or "is_online" not in data:
        msg = f"Missing is_online in status response for device {did}"
        raise MalformedResponseError(msg)

    return DeviceStatus(did=did, online=bool(data["is_online"]))


def deserialize_mode(did: str, data: dict[str, Any] | None) -> Any:
    """Extract the mode token from the /devdata/{did}/latest response.

    Args:
        did: Device identifier.
        data: Raw body in format {"did": str, "updated_at": int, "attr": {"mode": ...}}.

    Raises:
        MalformedResponseError: If the mode attribute is missing.
    """
    attrs = (data or {}).get("attr")
    if not isinstance(attrs, dict) or attrs.get("mode") is None:
        msg = f"Missing attr.mode in latest data for device {did}"
        raise MalformedResponseError(msg)

    return attrs["mode"]
