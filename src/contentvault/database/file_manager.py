import logging
import os
import re
from pathlib import Path
from typing import Optional

from contentvault.database.base import SlotBackend
from contentvault.exceptions import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileBackend(SlotBackend):
    """Keeps each key as a JSON document under ``base_dir``."""

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            base_dir = Path.home() / ".contentvault"
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        file_path = self.path_for(key)
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {file_path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        file_path = self.path_for(key)
        tmp_path = file_path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, file_path)
        except OSError as e:
            raise StorageError(f"Failed to write {file_path}: {e}") from e
        logger.debug(f"Saved {key} to {file_path}")

