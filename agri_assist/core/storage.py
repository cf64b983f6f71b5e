"""
Durable local key-value store.

Values are kept in a single JSON file under the data directory. The file is read
once when the store is created and rewritten synchronously on every mutation.
Corrupt or unreadable data is treated as absent.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .config import config

logger = logging.getLogger(__name__)

STORE_FILENAME = "storage.json"


class KeyValueStore:
    """JSON-file backed key-value store with serialized writes."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else config.data_dir / STORE_FILENAME
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read local store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring local store {self.path}: expected an object")
            return {}
        return data

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            tmp_path.write_text(json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Could not save local store {self.path}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()
