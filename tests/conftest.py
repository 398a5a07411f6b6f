"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientSession

from pyheatzy.store import ConfigStore, CredentialStore


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable
    from pathlib import Path


CREDENTIALS_SECTION = """login=user@example.com
password=secret
appid=app-123
token=old-token
expiry=2025-01-01 00:00:00
"""

DEVICES_SECTION = """[devices]
did123=Heatzy;AA:BB:CC:DD:EE:FF;Living Room
did456=Pilote2;11:22:33:44:55:66;Bedroom
"""


@pytest.fixture
async def mock_session() -> AsyncGenerator[ClientSession]:
    """Create a mock aiohttp ClientSession.

    Yields:
        Mock ClientSession for testing.
    """
    session = AsyncMock(spec=ClientSession)
    session.closed = False

    async def mock_close() -> None:
        session.closed = True

    session.close = mock_close

    yield session

    if not session.closed:
        await session.close()


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Return a factory of mock aiohttp ClientResponse objects.

    The mocks work as ``async with session.request(...) as response`` targets.
    """

    def _make(
        status: int = 200,
        payload: Any = None,
        content_type: str = "application/json",
    ) -> MagicMock:
        response = MagicMock()
        response.status = status
        response.headers = {}
        response.content_type = content_type
        response.json = AsyncMock(return_value=payload if payload is not None else {})
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)
        return response

    return _make


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Write a store with two registered devices and return its path."""
    path = tmp_path / "heatzy.conf"
    path.write_text(CREDENTIALS_SECTION + DEVICES_SECTION, encoding="utf-8")
    return path


@pytest.fixture
def config_store(config_path: Path) -> ConfigStore:
    return ConfigStore(config_path)


@pytest.fixture
def credential_store(config_store: ConfigStore) -> CredentialStore:
    return CredentialStore(config_store)
