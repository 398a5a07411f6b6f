"""Persisted configuration store shared by credentials and the device registry.

The store is a human-editable text file. The top section holds ``key=value``
credential lines; below a ``[devices]`` marker each line describes one device
as ``did=product;mac;alias``::

    login=user@example.com
    password=secret
    appid=c70a66ff039d41b4a220e198b0fcc8b3
    token=null
    expiry=
    [devices]
    did123=Heatzy;AA:BB:CC:DD:EE:FF;Living Room

Both sections are written by replacing the whole file through a temporary
sibling and an atomic rename. Each writer rewrites only its own section and
copies the other one unchanged.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path

from pyheatzy.const import (
    CONFIG_ENV_VAR,
    DEFAULT_APPLICATION_ID,
    DEFAULT_CONFIG_PATH,
    DEVICES_SECTION,
    KEY_APPID,
    KEY_EXPIRY,
    KEY_LOGIN,
    KEY_PASSWORD,
    KEY_TOKEN,
    TOKEN_NULL,
)
from pyheatzy.exceptions import AppIdMissingError, ConfigMissingError, CredentialsMissingError
from pyheatzy.models import Credentials


_LOGGER = logging.getLogger(__name__)

_SECTION_RE = re.compile(rf"^{re.escape(DEVICES_SECTION)}[ \t]*\r?$", re.MULTILINE)


def default_config_path() -> Path:
    """Return the store path from the environment or the default location."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


class ConfigStore:
    """Raw access to the two sections of the persisted store.

    Attributes:
        path: Location of the store file.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        """Initialize the store.

        Args:
            path: Store file location. Defaults to $HEATZY_CONFIG or ~/.heatzy.conf.
        """
        self.path = Path(path).expanduser() if path is not None else default_config_path()

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self.path.is_file()

    def read(self) -> tuple[str, str]:
        """Read the store split into its two sections.

        Returns:
            Tuple of (credentials_text, devices_text). The devices text is
            everything after the ``[devices]`` marker line, or "" if the
            marker is absent.

        Raises:
            ConfigMissingError: If the store file does not exist.
        """
        if not self.exists():
            msg = f"Configuration file {self.path} not found"
            raise ConfigMissingError(msg)

        text = self.path.read_text(encoding="utf-8")
        match = _SECTION_RE.search(text)
        if match is None:
            return text, ""

        devices_start = match.end()
        if text.startswith("\n", devices_start):
            devices_start += 1
        return text[: match.start()], text[devices_start:]

    def write_credentials(self, values: dict[str, str]) -> None:
        """Overwrite credential keys, keeping all other lines and the device section.

        Args:
            values: Keys to set. Existing lines for these keys are replaced
                in place; missing keys are appended to the credentials section.
        """
        head, devices = self.read()
        pending = dict(values)
        lines: list[str] = []

        for line in head.splitlines(keepends=True):
            key = line.partition("=")[0].strip()
            if "=" in line and key in pending:
                lines.append(f"{key}={pending.pop(key)}\n")
            else:
                lines.append(line)

        if lines and not lines[-1].endswith("\n"):
            lines[-1] += "\n"
        lines.extend(f"{key}={value}\n" for key, value in pending.items())

        self._write("".join(lines), devices)

    def write_devices(self, lines: list[str]) -> None:
        """Replace the whole device section, keeping the credentials section.

        Args:
            lines: Device lines without trailing newlines.
        """
        head, _ = self.read()
        if head and not head.endswith("\n"):
            head += "\n"
        self._write(head, "".join(f"{line}\n" for line in lines))

    def create(self, values: dict[str, str]) -> None:
        """Write a new store holding only a credentials section.

        Raises:
            FileExistsError: If the store already exists.
        """
        if self.exists():
            msg = f"Configuration file {self.path} already exists"
            raise FileExistsError(msg)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write("".join(f"{key}={value}\n" for key, value in values.items()), "")

    def _write(self, head: str, devices: str) -> None:
        """Atomically replace the store file with the given sections."""
        content = f"{head}{DEVICES_SECTION}\n{devices}"
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp_file:
                tmp_file.write(content)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            if self.path.exists():
                os.chmod(tmp_name, self.path.stat().st_mode & 0o777)
            os.replace(tmp_name, self.path)
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)

        _LOGGER.debug("Wrote configuration to %s", self.path)


def parse_credentials(text: str) -> dict[str, str]:
    """Parse ``key=value`` lines, ignoring blanks and ``#`` comments.

    Keys are stripped; values are kept exactly as written.
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value
    return values


class CredentialStore:
    """Load and save the credentials section of the persisted store."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    @property
    def path(self) -> Path:
        """Location of the backing store file."""
        return self._store.path

    def load(self, *, login: str | None = None, password: str | None = None) -> Credentials:
        """Load credentials from the store.

        Args:
            login: Explicit login overriding the stored one.
            password: Explicit password overriding the stored one.

        Returns:
            Credentials with the "null" token sentinel if none is stored.

        Raises:
            ConfigMissingError: If the store file does not exist.
            AppIdMissingError: If the store has no application id.
            CredentialsMissingError: If login or password is neither stored nor given.
        """
        head, _ = self._store.read()
        values = parse_credentials(head)

        appid = values.get(KEY_APPID, "")
        if not appid:
            msg = f"No application id ({KEY_APPID}=) in {self.path}"
            raise AppIdMissingError(msg)

        login = login or values.get(KEY_LOGIN, "")
        password = password or values.get(KEY_PASSWORD, "")
        if not login or not password:
            msg = f"No login/password in {self.path} and none given on the command line"
            raise CredentialsMissingError(msg)

        return Credentials(
            login=login,
            password=password,
            appid=appid,
            token=values.get(KEY_TOKEN) or TOKEN_NULL,
            expiry=values.get(KEY_EXPIRY, ""),
        )

    def save(self, credentials: Credentials) -> None:
        """Persist login, password, token and expiry.

        The application id, any other line of the credentials section and the
        device section are left untouched.
        """
        self._store.write_credentials(
            {
                KEY_LOGIN: credentials.login,
                KEY_PASSWORD: credentials.password,
                KEY_TOKEN: credentials.token,
                KEY_EXPIRY: credentials.expiry,
            }
        )
        _LOGGER.debug("Saved credentials for %s", credentials.login)

    def create(self, login: str, password: str, appid: str = DEFAULT_APPLICATION_ID) -> Credentials:
        """Create a new store for an account.

        Raises:
            FileExistsError: If the store already exists.
        """
        credentials = Credentials(login=login, password=password, appid=appid)
        self._store.create(
            {
                KEY_LOGIN: credentials.login,
                KEY_PASSWORD: credentials.password,
                KEY_APPID: credentials.appid,
                KEY_TOKEN: credentials.token,
                KEY_EXPIRY: credentials.expiry,
            }
        )
        _LOGGER.info("Created configuration file %s", self.path)
        return credentials
