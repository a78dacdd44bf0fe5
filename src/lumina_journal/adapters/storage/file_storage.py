"""File-backed key-value storage."""

import re
from pathlib import Path
from typing import Optional

from lumina_journal.core import KeyValueStorage


class FileStorage(KeyValueStorage):
    """Keep each storage slot as one file in a data directory."""

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir

    def get_item(self, key: str) -> Optional[str]:
        path = self._get_slot_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._get_slot_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        path = self._get_slot_path(key)
        if path.exists():
            path.unlink()

    def _get_slot_path(self, key: str) -> Path:
        """Get path for slot file."""
        safe_key = re.sub(r'[^\w.-]', '_', key)
        if not safe_key:
            raise ValueError("Storage key cannot be empty")
        return self.storage_dir / f"{safe_key}.json"
