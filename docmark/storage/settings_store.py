from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Dict, Optional, Protocol

from docmark.core.config import get_settings


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[dict]: ...

    def set(self, key: str, value: dict) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, handy for tests and embedding hosts."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[dict]:
        raw = self._items.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: dict) -> None:
        self._items[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStore:
    """One JSON file per key inside the configured store directory."""

    _unsafe = re.compile(r"[^A-Za-z0-9._-]")

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = Path(base_dir or get_settings().store_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{self._unsafe.sub('_', key)}.json"

    def get(self, key: str) -> Optional[dict]:
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def set(self, key: str, value: dict) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
