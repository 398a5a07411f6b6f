"""Custom exceptions for pyheatzy library."""

from __future__ import annotations

from typing import Any


class HeatzyError(Exception):
    """Base exception for all Heatzy errors."""


class ConfigMissingError(HeatzyError):
    """Exception raised when the persisted configuration store does not exist."""


class CredentialsMissingError(HeatzyError):
    """Exception raised when no login or password is available."""


class AppIdMissingError(HeatzyError):
    """Exception raised when the configuration store has no application id."""


class AuthenticationError(HeatzyError):
    """Exception raised when the cloud rejects a login attempt."""


class MalformedResponseError(HeatzyError):
    """Exception raised when an expected field is absent from a cloud response."""


class UnknownActionError(HeatzyError):
    """Exception raised for an action the command line does not support."""


class HeatzyConnectionError(HeatzyError):
    """Exception raised for connection failures."""


class HeatzyTimeoutError(HeatzyError):
    """Exception raised when API requests timeout."""


class DeviceError(HeatzyError):
    """Exception raised for device-related errors.

    Attributes:
        device_id: Optional device ID associated with the error.
    """

    def __init__(self, message: str = "", device_id: str | None = None) -> None:
        """Initialize DeviceError.

        Args:
            message: Error message.
            device_id: Optional device ID associated with the error.
        """
        super().__init__(message)
        self.device_id = device_id


class UnknownDeviceError(DeviceError):
    """Exception raised when a device ID is not in the local registry."""


class UnknownStateError(HeatzyError):
    """Exception raised for a state name outside the abstract vocabulary.

    Attributes:
        state: The rejected state name.
    """

    def __init__(self, message: str = "", state: str | None = None) -> None:
        """Initialize UnknownStateError.

        Args:
            message: Error message.
            state: The rejected state name.
        """
        super().__init__(message)
        self.state = state


class UnsupportedProductError(HeatzyError):
    """Exception raised for a product family without a state mapping.

    Attributes:
        product: The product name that has no mapping.
    """

    def __init__(self, message: str = "", product: str | None = None) -> None:
        """Initialize UnsupportedProductError.

        Args:
            message: Error message.
            product: The product name that has no mapping.
        """
        super().__init__(message)
        self.product = product


class UnknownWireTokenError(HeatzyError):
    """Exception raised when a device reports a mode outside its product table.

    Attributes:
        token: The wire token that could not be decoded.
    """

    def __init__(self, message: str = "", token: Any = None) -> None:
        """Initialize UnknownWireTokenError.

        Args:
            message: Error message.
            token: The wire token that could not be decoded.
        """
        super().__init__(message)
        self.token = token
