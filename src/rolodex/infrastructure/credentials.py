"""HTTP Basic authentication: credential store and header verification.

The store is filled once at startup from a JSON file of username -> secret
and then read concurrently by request threads.
"""

import binascii
import json
import logging
import os
import secrets
from base64 import b64decode
from collections.abc import Mapping
from pathlib import Path

from rolodex.domain import (
    CredentialsFileError,
    InvalidAuthHeader,
    InvalidBase64Value,
    InvalidScheme,
    InvalidUtf8Value,
)
from rolodex.infrastructure.locks import ReadWriteLock

logger = logging.getLogger(__name__)

API_USERS_FILE_KEY = "API_USERS_FILE"
DEFAULT_API_USERS_FILE = "api_users.json"

BASIC_SCHEME = "basic"


class CredentialStore:
    """username -> secret, at most one secret per username."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = ReadWriteLock()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "CredentialStore":
        store = cls()
        store.load(mapping)
        return store

    @classmethod
    def from_file(cls, path: str | Path) -> "CredentialStore":
        """Load a JSON object mapping usernames to secrets."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise CredentialsFileError(f"Cannot read credentials file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CredentialsFileError(f"Credentials file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise CredentialsFileError(
                f"Credentials file {path} must be a JSON object of username -> secret strings."
            )
        store = cls.from_mapping(data)
        logger.info("Loaded %d API user(s) from %s", len(data), path)
        return store

    @classmethod
    def from_env(cls) -> "CredentialStore":
        """Load from the file named by API_USERS_FILE (default api_users.json)."""
        return cls.from_file(os.environ.get(API_USERS_FILE_KEY, DEFAULT_API_USERS_FILE))

    def load(self, mapping: Mapping[str, str]) -> None:
        """Replace the whole mapping."""
        new_data = dict(mapping)
        with self._lock.write():
            self._data = new_data

    def secret_for(self, username: str) -> str | None:
        with self._lock.read():
            return self._data.get(username)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._data)


class BasicAuthVerifier:
    """Checks `Authorization: Basic <base64(user:secret)>` headers against a CredentialStore."""

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    def verify_basic_auth(self, header_value: str) -> bool:
        """Return True if the header carries a known username and its exact secret.

        A well-formed header with wrong credentials returns False; a malformed
        one raises an AuthError subclass.
        """
        scheme, sep, encoded = header_value.partition(" ")
        if not sep:
            raise InvalidAuthHeader()
        if " " in encoded:
            raise InvalidBase64Value()
        if scheme.lower() != BASIC_SCHEME:
            raise InvalidScheme(scheme)
        username, password = _decode_credentials(encoded)
        stored = self._store.secret_for(username)
        if stored is None:
            return False
        return secrets.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))


def _decode_credentials(encoded: str) -> tuple[str, str]:
    try:
        raw = b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Value() from e
    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUtf8Value() from e
    username, sep, password = decoded.partition(":")
    if not sep:
        raise InvalidAuthHeader()
    return username, password
