"""Low-level API client for the Heatzy cloud endpoints.

This module provides direct HTTP communication with the Heatzy cloud.
All methods return (status_code, response_data) tuples for maximum flexibility.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyheatzy.const import (
    DEFAULT_BASE_URL,
    DEFAULT_BINDINGS_LIMIT,
    DEFAULT_TIMEOUT,
    HEADER_APPLICATION_ID,
    HEADER_USER_TOKEN,
)
from pyheatzy.exceptions import HeatzyConnectionError, HeatzyTimeoutError
from pyheatzy.serializers import is_token_error


if TYPE_CHECKING:
    from types import TracebackType

    from pyheatzy.auth import SessionManager

_LOGGER = logging.getLogger(__name__)


class HeatzyAPI:
    """Command dispatcher for the Heatzy cloud.

    This class handles raw HTTP communication with the cloud, attaching the
    application id and the bearer token of the session manager to every
    request.

    A request rejected for an invalid or expired token triggers exactly one
    login through the session manager and one resend of the same request.
    The resent response is returned whatever it contains, so a credential
    the cloud keeps refusing never causes a loop.

    Example:
        ```python
        async with ClientSession() as session:
            manager = SessionManager(credentials, credential_store, session=session)
            api = HeatzyAPI(session_manager=manager, session=session)

            status, data = await api.get_bindings()
            status, data = await api.control_device("did123", {"attrs": {"mode": "eco"}})
        ```

    Attributes:
        base_url: Base URL for the API (default: https://euapi.gizwits.com/app).
    """

    def __init__(
        self,
        *,
        session_manager: SessionManager,
        session: ClientSession | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        """Initialize the API client.

        Args:
            session_manager: SessionManager providing tokens and logins.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            base_url: Base URL for the API. Defaults to the Heatzy EU cloud.
        """
        self._session_manager = session_manager
        self._session = session
        self._owns_session = session is None
        self.base_url = base_url.rstrip("/")

    async def __aenter__(self) -> HeatzyAPI:
        """Enter the context manager.

        Creates session if needed and shares it with the session manager.

        Returns:
            Self for use in async with statements.
        """
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True

        self._session_manager.set_session(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Closes session if it was created by this client.
        """
        if self._owns_session and self._session is not None:
            await self._session.close()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_data: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        retry_auth: bool = True,
    ) -> tuple[int, dict[str, Any] | None]:
        """Make an authenticated API request.

        This is the core method for all HTTP communication. It handles:
        - Application id and token headers
        - A first login when no token was ever issued
        - One reauthentication and resend on a token error
        - Response parsing

        Args:
            method: HTTP method (GET, POST).
            endpoint: API endpoint path (e.g., "/bindings").
            json_data: Optional JSON data for request body.
            params: Optional query parameters.
            retry_auth: Whether to reauthenticate and resend once on a token error.

        Returns:
            Tuple of (status_code, response_data). Response data is None if
            the response has no JSON content.

        Raises:
            AuthenticationError: If the login triggered by a token error fails.
            HeatzyTimeoutError: If request times out.
            HeatzyConnectionError: If connection fails.
        """
        reauthenticated = False
        if not self._session_manager.has_token:
            _LOGGER.debug("No token issued yet, authenticating before %s", endpoint)
            await self._session_manager.authenticate()
            reauthenticated = True

        status, data = await self._send(method, endpoint, json_data=json_data, params=params)

        if retry_auth and not reauthenticated and is_token_error(status, data):
            _LOGGER.info("Token rejected for %s, reauthenticating", endpoint)
            await self._session_manager.authenticate()

            # Second attempt is final, whatever it returns
            status, data = await self._send(method, endpoint, json_data=json_data, params=params)

        return status, data

    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        json_data: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> tuple[int, dict[str, Any] | None]:
        """Issue a single HTTP request with the current token."""
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make request."
            raise RuntimeError(msg)

        url = f"{self.base_url}{endpoint}"
        headers = {
            HEADER_APPLICATION_ID: self._session_manager.appid,
            HEADER_USER_TOKEN: self._session_manager.token,
        }
        timeout = ClientTimeout(total=DEFAULT_TIMEOUT)

        _LOGGER.debug("%s %s params=%s body=%s", method, url, params, json_data)

        try:
            async with self._session.request(
                method,
                url,
                json=json_data,
                params=params,
                headers=headers,
                timeout=timeout,
            ) as response:
                response_data = None
                if "application/json" in (response.content_type or ""):
                    try:
                        decoded = await response.json()
                    except json.JSONDecodeError:
                        _LOGGER.warning("Invalid JSON in response from %s", url)
                    else:
                        if isinstance(decoded, dict):
                            response_data = decoded

                _LOGGER.debug("Response from %s (HTTP %d): %s", url, response.status, response_data)
                return response.status, response_data

        except TimeoutError as exc:
            _LOGGER.exception("Request to %s timed out", url)
            msg = f"Request to {endpoint} timed out"
            raise HeatzyTimeoutError(msg) from exc

        except ClientError as exc:
            _LOGGER.exception("Connection error for %s", url)
            msg = f"Failed to connect to API: {exc}"
            raise HeatzyConnectionError(msg) from exc

    # -------------------------------------------------------------------------
    # Device Endpoints
    # -------------------------------------------------------------------------

    async def get_bindings(self, limit: int = DEFAULT_BINDINGS_LIMIT) -> tuple[int, dict[str, Any] | None]:
        """Get the devices bound to the account.

        Returns:
            Tuple of (status_code, response_data) where response_data has format:
            {"devices": [{"did": str, "product_name": str, "mac": str, "dev_alias": str, ...}]}
        """
        return await self.request("GET", "/bindings", params={"limit": str(limit), "skip": "0"})

    async def get_device(self, did: str) -> tuple[int, dict[str, Any] | None]:
        """Get device connectivity status.

        Returns:
            Tuple of (status_code, response_data) where response_data has format:
            {"did": str, "is_online": bool, ...}
        """
        return await self.request("GET", f"/devices/{did}")

    async def get_latest_data(self, did: str) -> tuple[int, dict[str, Any] | None]:
        """Get the latest attributes reported by a device.

        Returns:
            Tuple of (status_code, response_data) where response_data has format:
            {"did": str, "updated_at": int, "attr": {"mode": ...}}
        """
        return await self.request("GET", f"/devdata/{did}/latest")

    async def control_device(self, did: str, payload: dict[str, Any]) -> tuple[int, dict[str, Any] | None]:
        """Send a control command to a device.

        Args:
            did: Device identifier.
            payload: Product-specific body, {"raw": [...]} or {"attrs": {...}}.

        Returns:
            Tuple of (status_code, response_data).
        """
        return await self.request("POST", f"/control/{did}", json_data=payload)
