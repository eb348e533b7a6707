"""Key/value preference stores holding raw textual settings."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    @abstractmethod
    def get_string(self, key: str, default: str = "") -> str: pass
    @abstractmethod
    def put_string(self, key: str, value: str) -> None: pass
    @abstractmethod
    def remove(self, key: str) -> None: pass


class MemoryPreferenceStore(PreferenceStore):
    def __init__(self, values: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(values or {})

    def get_string(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def put_string(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


class JsonPreferenceStore(MemoryPreferenceStore):
    """Preference store written through to a JSON file on every edit."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except Exception:
            logger.exception("Failed to read preferences file: %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file without a top-level object: %s", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self) -> None:
        self.path.write_text(json.dumps(self._values, indent=2, sort_keys=True))

    def put_string(self, key: str, value: str) -> None:
        super().put_string(key, value)
        self._write()

    def remove(self, key: str) -> None:
        super().remove(key)
        self._write()
