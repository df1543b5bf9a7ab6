"""File-backed key/value store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from permithub.common.errors import StorageError
from permithub.common.fs import read_json, write_json_atomic

DEFAULT_STORE_PATH = Path.home() / ".permit-hub" / "store.json"


class LocalStore:
    """JSON object on disk; every write replaces the file atomically."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else DEFAULT_STORE_PATH

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = read_json(self.path)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read store {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"Store {self.path} must contain a JSON object")
        return payload

    def _save(self, payload: dict[str, Any]) -> None:
        try:
            write_json_atomic(self.path, payload)
        except OSError as exc:
            raise StorageError(f"Cannot write store {self.path}: {exc}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        payload = self._load()
        payload[key] = value
        self._save(payload)

    def remove(self, key: str) -> None:
        payload = self._load()
        if key in payload:
            del payload[key]
            self._save(payload)
