"""Pytest configuration and fixtures for integration tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

from pyheatzy.const import DEFAULT_BASE_URL
from pyheatzy.store import ConfigStore, CredentialStore


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from pyheatzy import HeatzyClient


# Load .env file from project root
env_path = Path(__file__).parents[2] / ".env"
load_dotenv(env_path)


@pytest.fixture(scope="session")
def integration_config() -> dict[str, str]:
    """Load integration test configuration from environment.

    Raises:
        ValueError: If required environment variables are missing.
    """
    login = os.getenv("HEATZY_LOGIN")
    password = os.getenv("HEATZY_PASSWORD")
    base_url = os.getenv("HEATZY_API_BASE_URL", DEFAULT_BASE_URL)

    if not login or not password:
        msg = "Missing required environment variables. Please create .env file with HEATZY_LOGIN and HEATZY_PASSWORD"
        raise ValueError(msg)

    return {
        "login": login,
        "password": password,
        "base_url": base_url,
    }


@pytest.fixture
def test_device_id() -> str | None:
    """Get test device ID from environment, or None to use the first bound device."""
    return os.getenv("HEATZY_TEST_DEVICE_ID")


@pytest.fixture
def integration_store(tmp_path: Path, integration_config: dict[str, str]) -> CredentialStore:
    """Create a fresh store with the account credentials and no token."""
    store = CredentialStore(ConfigStore(tmp_path / "heatzy.conf"))
    store.create(integration_config["login"], integration_config["password"])
    return store


@pytest.fixture
async def integration_client(
    integration_store: CredentialStore, integration_config: dict[str, str]
) -> AsyncGenerator[HeatzyClient]:
    """Create a client on the fresh store."""
    from pyheatzy import HeatzyClient

    async with HeatzyClient(integration_store.path, base_url=integration_config["base_url"]) as client:
        yield client
