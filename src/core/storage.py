#!/usr/bin/env python3
"""
Durable key-value storage for a single client instance.

A small get/set/delete interface over string values. The history store
receives one of these explicitly instead of reaching for global state.
"""

import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from core.exceptions import StorageError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r'^[A-Za-z0-9_.-]+$')


class KeyValueStorage(ABC):
    """Abstract string key-value store with no transactional guarantees."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; deleting a missing key is not an error."""


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileStorage(KeyValueStorage):
    """
    One UTF-8 file per key inside a directory.

    Writes go to a temporary file in the same directory which then
    replaces the target, so readers see either the old or the new value.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()
        self._lock = threading.Lock()
        logger.debug(f"FileStorage using {self.directory}")

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
                try:
                    with os.fdopen(fd, 'w', encoding='utf-8') as f:
                        f.write(value)
                    os.replace(tmp_name, path)
                except BaseException:
                    if os.path.exists(tmp_name):
                        os.unlink(tmp_name)
                    raise
            except OSError as e:
                raise StorageError(f"Failed to write {path}", context={'key': key, 'original_error': str(e)})

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageError(f"Failed to delete {path}", context={'key': key, 'original_error': str(e)})
