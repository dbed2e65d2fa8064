"""Durable KeyValueStore backed by a single JSON object on disk.

The whole mapping is loaded once at construction and rewritten on every
mutation (write to a sibling temp file, then atomic replace). A missing
file is an empty store; an unreadable or corrupt file is logged and
treated as empty so startup never fails on bad state.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from core.errors import StorageError

logger = logging.getLogger(__name__)


class JsonFileStore:
    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._data: Dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def keys(self) -> list[str]:
        return list(self._data)

    def _load(self) -> Dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError("root is not an object")
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            logger.warning("Failed to load state from %s: %s", self._path, exc)
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _flush(self) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write state to {self._path}: {e}") from e
