"""
Key-value persistence facility.

Values are text documents stored under a single name each.
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from bp_importer.utils.exceptions import PersistenceError, PersistenceErrorKind

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[A-Za-z0-9_.-]+")


class KeyValueStore(ABC):
    """Minimal named-value storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; absent keys are ignored."""


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store, used in tests and dry runs."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class FileKeyValueStore(KeyValueStore):
    """
    Store each key as ``<directory>/<key>.json``.

    Writes go through a temporary file and an atomic rename so a crash
    never leaves a half-written value behind.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.fullmatch(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise PersistenceError(PersistenceErrorKind.DECODE_FAILED, key, str(e)) from e
        except OSError as e:
            raise PersistenceError(PersistenceErrorKind.READ_FAILED, key, str(e)) from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise PersistenceError(PersistenceErrorKind.WRITE_FAILED, key, str(e)) from e
        logger.debug(f"Persisted {key} to {path}")

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(PersistenceErrorKind.WRITE_FAILED, key, str(e)) from e
