import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)

APP_NAME = "wordguess"


class PersistenceStore:
    """Interface for the string key-value store the engine saves into."""

    def get_string(self, key: str) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def set_string(self, key: str, value: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def remove(self, key: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class InMemoryStore(PersistenceStore):
    """Test/deterministic in-memory store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get_string(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set_string(self, key: str, value: str) -> None:
        self.writes += 1
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStore(PersistenceStore):
    """Filesystem-backed store keeping every key in one JSON object.

    Writes are atomic (temporary file + os.replace) so a crash never leaves a
    half-written file behind. I/O errors are logged and swallowed: saving is
    best-effort and must never take the game down.
    """

    def __init__(self, root: Optional[Path] = None, filename: str = "store.json") -> None:
        self.root = Path(root) if root is not None else Path(user_data_dir(APP_NAME, appauthor=False))
        self.path = self.root / filename

    def get_string(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_string(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store %s does not hold an object; ignoring it", self.path)
            return {}
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Failed to write store %s: %s", self.path, exc)
            return
        logger.debug("Wrote %d key(s) to %s", len(data), self.path)
