"""Tests for the command dispatcher and its single reauthentication retry."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientError

from pyheatzy.api import HeatzyAPI
from pyheatzy.auth import SessionManager
from pyheatzy.exceptions import AuthenticationError, HeatzyConnectionError, HeatzyTimeoutError
from pyheatzy.models import Credentials


if TYPE_CHECKING:
    from collections.abc import Callable

    from aiohttp import ClientSession


TOKEN_INVALID = {"error_code": 9004, "error_message": "token invalid!", "detail_message": None}


def make_manager(token: str = "old-token") -> MagicMock:
    """Create a mock SessionManager whose authenticate swaps the token."""
    manager = MagicMock(spec=SessionManager)
    manager.credentials = Credentials(login="u", password="p", appid="app-123", token=token)
    manager.appid = "app-123"
    manager.token = token
    manager.has_token = token != "null"

    async def authenticate() -> tuple[str, str]:
        manager.token = "new-token"
        manager.has_token = True
        return "new-token", "2025-01-01 00:00:00"

    manager.authenticate = AsyncMock(side_effect=authenticate)
    return manager


@pytest.fixture
def manager() -> MagicMock:
    return make_manager()


@pytest.fixture
def api(manager: MagicMock, mock_session: ClientSession) -> HeatzyAPI:
    return HeatzyAPI(session_manager=manager, session=mock_session)


def sent_tokens(mock_session: ClientSession) -> list[str]:
    return [call.kwargs["headers"]["X-Gizwits-User-token"] for call in mock_session.request.call_args_list]


class TestRequest:
    """Test plain request handling."""

    async def test_headers_and_url(
        self, api: HeatzyAPI, mock_session: ClientSession, make_response: Callable[..., MagicMock]
    ) -> None:
        """Test the application id and token are attached as headers."""
        mock_session.request.return_value = make_response(HTTPStatus.OK, {"devices": []})

        status, data = await api.request("GET", "/bindings", params={"limit": "20"})

        assert status == HTTPStatus.OK
        assert data == {"devices": []}
        call = mock_session.request.call_args
        assert call.args == ("GET", "https://euapi.gizwits.com/app/bindings")
        assert call.kwargs["params"] == {"limit": "20"}
        assert call.kwargs["headers"] == {
            "X-Gizwits-Application-Id": "app-123",
            "X-Gizwits-User-token": "old-token",
        }

    async def test_non_json_response(
        self, api: HeatzyAPI, mock_session: ClientSession, make_response: Callable[..., MagicMock]
    ) -> None:
        """Test a non-JSON body gives None data."""
        mock_session.request.return_value = make_response(HTTPStatus.BAD_GATEWAY, content_type="text/html")

        assert await api.request("GET", "/bindings") == (HTTPStatus.BAD_GATEWAY, None)

    async def test_session_not_initialized(self, manager: MagicMock) -> None:
        """Test a request without session fails clearly."""
        api = HeatzyAPI(session_manager=manager)

        with pytest.raises(RuntimeError, match="Session not initialized"):
            await api.request("GET", "/bindings")

    async def test_timeout(self, api: HeatzyAPI, mock_session: ClientSession) -> None:
        mock_session.request.side_effect = TimeoutError()

        with pytest.raises(HeatzyTimeoutError):
            await api.request("GET", "/bindings")

    async def test_connection_error(self, api: HeatzyAPI, mock_session: ClientSession) -> None:
        mock_session.request.side_effect = ClientError("refused")

        with pytest.raises(HeatzyConnectionError):
            await api.request("GET", "/bindings")

    async def test_endpoint_helpers(
        self, api: HeatzyAPI, mock_session: ClientSession, make_response: Callable[..., MagicMock]
    ) -> None:
        """Test the device endpoints."""
        mock_session.request.return_value = make_response(HTTPStatus.OK, {})

        await api.get_device("did123")
        await api.get_latest_data("did123")
        await api.control_device("did123", {"raw": [1, 1, 0]})

        calls = mock_session.request.call_args_list
        assert calls[0].args == ("GET", "https://euapi.gizwits.com/app/devices/did123")
        assert calls[1].args == ("GET", "https://euapi.gizwits.com/app/devdata/did123/latest")
        assert calls[2].args == ("POST", "https://euapi.gizwits.com/app/control/did123")
        assert calls[2].kwargs["json"] == {"raw": [1, 1, 0]}


class TestReauthentication:
    """Test the bounded retry on token errors."""

    async def test_no_retry_on_success(
        self,
        api: HeatzyAPI,
        manager: MagicMock,
        mock_session: ClientSession,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Test a successful first response makes no login."""
        mock_session.request.return_value = make_response(HTTPStatus.OK, {"is_online": True})

        await api.request("GET", "/devices/did123")

        manager.authenticate.assert_not_called()
        assert mock_session.request.call_count == 1

    async def test_retry_after_token_error(
        self,
        api: HeatzyAPI,
        manager: MagicMock,
        mock_session: ClientSession,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Test a token error triggers one login and one resend with the new token."""
        mock_session.request.side_effect = [
            make_response(HTTPStatus.BAD_REQUEST, TOKEN_INVALID),
            make_response(HTTPStatus.OK, {"attr": {"mode": "eco"}}),
        ]

        status, data = await api.request("GET", "/devdata/did123/latest")

        assert status == HTTPStatus.OK
        assert data == {"attr": {"mode": "eco"}}
        manager.authenticate.assert_awaited_once()
        assert sent_tokens(mock_session) == ["old-token", "new-token"]

    async def test_second_token_error_is_final(
        self,
        api: HeatzyAPI,
        manager: MagicMock,
        mock_session: ClientSession,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Test two consecutive token errors make no third request."""
        second = {"error_code": 9004, "error_message": "token invalid again"}
        mock_session.request.side_effect = [
            make_response(HTTPStatus.BAD_REQUEST, TOKEN_INVALID),
            make_response(HTTPStatus.BAD_REQUEST, second),
            make_response(HTTPStatus.OK, {}),
        ]

        status, data = await api.request("GET", "/bindings")

        assert status == HTTPStatus.BAD_REQUEST
        assert data == second
        assert mock_session.request.call_count == 2
        manager.authenticate.assert_awaited_once()

    async def test_failed_login_stops_retry(
        self,
        api: HeatzyAPI,
        manager: MagicMock,
        mock_session: ClientSession,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Test a failed login surfaces and the request is not resent."""
        mock_session.request.return_value = make_response(HTTPStatus.BAD_REQUEST, TOKEN_INVALID)
        manager.authenticate.side_effect = AuthenticationError("Authentication failed: bad password")

        with pytest.raises(AuthenticationError, match="bad password"):
            await api.request("GET", "/bindings")

        assert mock_session.request.call_count == 1

    async def test_other_errors_not_retried(
        self,
        api: HeatzyAPI,
        manager: MagicMock,
        mock_session: ClientSession,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Test errors unrelated to the token are returned as is."""
        error = {"error_code": 9017, "error_message": "device not bound"}
        mock_session.request.return_value = make_response(HTTPStatus.BAD_REQUEST, error)

        assert await api.request("GET", "/devices/x") == (HTTPStatus.BAD_REQUEST, error)
        manager.authenticate.assert_not_called()

    async def test_retry_disabled(
        self,
        api: HeatzyAPI,
        manager: MagicMock,
        mock_session: ClientSession,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Test retry_auth=False returns the token error directly."""
        mock_session.request.return_value = make_response(HTTPStatus.BAD_REQUEST, TOKEN_INVALID)

        status, _ = await api.request("GET", "/bindings", retry_auth=False)

        assert status == HTTPStatus.BAD_REQUEST
        manager.authenticate.assert_not_called()

    async def test_first_login_when_no_token(
        self, mock_session: ClientSession, make_response: Callable[..., MagicMock]
    ) -> None:
        """Test the null token logs in first and uses up the single login."""
        manager = make_manager(token="null")
        api = HeatzyAPI(session_manager=manager, session=mock_session)
        mock_session.request.return_value = make_response(HTTPStatus.BAD_REQUEST, TOKEN_INVALID)

        status, _ = await api.request("GET", "/bindings")

        assert status == HTTPStatus.BAD_REQUEST
        manager.authenticate.assert_awaited_once()
        assert sent_tokens(mock_session) == ["new-token"]


class TestContextManager:
    """Test session ownership."""

    async def test_shares_injected_session(self, manager: MagicMock, mock_session: ClientSession) -> None:
        """Test an injected session is handed to the manager and not closed."""
        api = HeatzyAPI(session_manager=manager, session=mock_session)

        async with api:
            manager.set_session.assert_called_once_with(mock_session)

        assert mock_session.closed is False
