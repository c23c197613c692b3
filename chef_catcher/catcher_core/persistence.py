"""
Persistence
===========

Key-value storage for the high score.

The core only needs `get(key)` and `set(key, value)` with string values.
Failures are handled by the caller (see ScoreTracker); stores here are
free to raise.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


class PersistenceGateway(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStore:
    """Dict-backed store. Lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    @property
    def data(self) -> Dict[str, str]:
        return dict(self._data)


class JsonFileStore:
    """
    Store backed by a flat JSON object on disk.

    The file is read on every `get` and rewritten on every `set`, which is
    fine for one key updated a few times per second at most.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        with open(self._path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self._path}")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump(data, f, indent=2)
