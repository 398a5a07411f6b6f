"""Constants for pyheatzy library."""

from __future__ import annotations

from pathlib import Path


# API Configuration
DEFAULT_BASE_URL = "https://euapi.gizwits.com/app"
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_LANGUAGE = "en"
DEFAULT_BINDINGS_LIMIT = 100

# Application id of the official Heatzy integration on the Gizwits cloud
DEFAULT_APPLICATION_ID = "c70a66ff039d41b4a220e198b0fcc8b3"

# Request headers
HEADER_APPLICATION_ID = "X-Gizwits-Application-Id"
HEADER_USER_TOKEN = "X-Gizwits-User-token"

# Gizwits error codes meaning the bearer token is no longer accepted
TOKEN_ERROR_CODES = frozenset({9004, 9006})

# Persisted store
CONFIG_ENV_VAR = "HEATZY_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".heatzy.conf"
DEVICES_SECTION = "[devices]"
KEY_LOGIN = "login"
KEY_PASSWORD = "password"
KEY_APPID = "appid"
KEY_TOKEN = "token"
KEY_EXPIRY = "expiry"
TOKEN_NULL = "null"
EXPIRY_FORMAT = "%Y-%m-%d %H:%M:%S"

# Product families
PRODUCT_HEATZY = "Heatzy"
PRODUCT_PILOTE2 = "Pilote2"

# Abstract states
STATE_OFF = "off"
STATE_COMFORT = "comfort"
STATE_ECO = "eco"
STATE_FREEZE = "freeze"
STATES = (STATE_OFF, STATE_COMFORT, STATE_ECO, STATE_FREEZE)

# Sentinels reported in place of an abstract state
STATE_OFFLINE = "offline"
STATE_UNKNOWN = "unknown"
