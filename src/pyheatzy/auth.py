"""Session management for the Heatzy cloud API."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyheatzy.const import (
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGE,
    DEFAULT_TIMEOUT,
    HEADER_APPLICATION_ID,
)
from pyheatzy.exceptions import AuthenticationError, HeatzyConnectionError, HeatzyTimeoutError
from pyheatzy.serializers import deserialize_login, error_message, format_expiry, is_error_response


if TYPE_CHECKING:
    from types import TracebackType

    from pyheatzy.models import Credentials
    from pyheatzy.store import CredentialStore

_LOGGER = logging.getLogger(__name__)


class SessionManager:
    """Own the account credentials and obtain bearer tokens for them.

    The manager holds the credentials loaded for the current invocation and is
    the only component allowed to change their token and expiry. Every
    successful login is persisted right away through the credential store, so
    the next invocation starts with the fresh token.

    Example:
        ```python
        store = CredentialStore(ConfigStore())
        credentials = store.load()

        async with ClientSession() as session:
            manager = SessionManager(credentials, store, session=session)
            token, expiry = await manager.authenticate()
        ```

    Attributes:
        base_url: Base URL for the API (without trailing slash).
        credentials: Credentials currently in use.
    """

    def __init__(
        self,
        credentials: Credentials,
        credential_store: CredentialStore,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session: ClientSession | None = None,
    ) -> None:
        """Initialize the session manager.

        Args:
            credentials: Credentials loaded for this invocation.
            credential_store: Store that persists credentials after a login.
            base_url: Base URL for the API. Defaults to the Heatzy EU cloud.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
        """
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")

        self._credential_store = credential_store
        self._session = session
        self._owns_session = session is None

    @property
    def token(self) -> str:
        """Bearer token of the current session."""
        return self.credentials.token

    @property
    def appid(self) -> str:
        """Application id sent with every request."""
        return self.credentials.appid

    @property
    def has_token(self) -> bool:
        """Check if a token has been issued for these credentials."""
        return self.credentials.has_token

    def set_session(self, session: ClientSession) -> None:
        """Set the aiohttp session for this manager.

        The manager will not take ownership and will not close this session.
        """
        self._session = session
        self._owns_session = False

    async def __aenter__(self) -> SessionManager:
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

    def _validate_session(self) -> ClientSession:
        """Return the session after checking it is usable.

        Raises:
            RuntimeError: If session is not initialized or is closed.
        """
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make requests."
            raise RuntimeError(msg)

        return self._session

    async def authenticate(self) -> tuple[str, str]:
        """Log in with the account credentials and store the new token.

        This method performs the following:
        1. POSTs login, password and language to /login with the application id header
        2. Rejects any response carrying an error indicator
        3. Extracts the token and the epoch expiry
        4. Updates the credentials and persists them

        On failure the credentials, in memory and on disk, are left as they were.

        Returns:
            Tuple of (token, expiry) where expiry is in display form.

        Raises:
            AuthenticationError: If the cloud rejects the login.
            MalformedResponseError: If a success response lacks the token or expiry.
            HeatzyTimeoutError: If the request times out.
            HeatzyConnectionError: If a connection error occurs.
        """
        session = self._validate_session()
        url = f"{self.base_url}/login"
        payload = {
            "username": self.credentials.login,
            "password": self.credentials.password,
            "lang": DEFAULT_LANGUAGE,
        }
        headers = {HEADER_APPLICATION_ID: self.credentials.appid}
        timeout = ClientTimeout(total=DEFAULT_TIMEOUT)

        _LOGGER.debug("Authenticating %s with %s", self.credentials.login, url)

        try:
            async with session.post(url, json=payload, headers=headers, timeout=timeout) as response:
                status = response.status
                data = await response.json(content_type=None)

        except TimeoutError as exc:
            msg = "Authentication request timed out"
            raise HeatzyTimeoutError(msg) from exc

        except ClientError as exc:
            msg = f"Failed to connect to API: {exc}"
            raise HeatzyConnectionError(msg) from exc

        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON response from API: {exc}"
            raise AuthenticationError(msg) from exc

        _LOGGER.debug("Login response (HTTP %d): %s", status, data)

        if not isinstance(data, dict):
            data = None

        if is_error_response(status, data):
            msg = f"Authentication failed: {error_message(status, data)}"
            raise AuthenticationError(msg)

        login = deserialize_login(data)
        expiry = format_expiry(login.expire_at)

        self.credentials = replace(self.credentials, token=login.token, expiry=expiry)
        self._credential_store.save(self.credentials)

        _LOGGER.info("Authentication successful for %s (token valid until %s)", self.credentials.login, expiry)
        return login.token, expiry
