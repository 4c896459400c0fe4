"""Local disk storage for uploaded material files."""

import logging
import os
import uuid
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional

from lms.core.config import get_settings

logger = logging.getLogger(__name__)


def safe_file_name(name: Optional[str]) -> Optional[str]:
    """Final path component of a client supplied name, or None if nothing usable is left."""
    base = PurePosixPath(PureWindowsPath(name or "").name).name.strip()
    if not base or set(base) == {"."}:
        return None
    return base


class MaterialStorage:
    """Stores material bytes under a single upload directory."""

    def __init__(self, upload_dir: str):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def generate_file_name(self, original_name: str) -> str:
        """Unique on-disk name that keeps the original extension."""
        suffix = Path(original_name or "").suffix
        return f"{uuid.uuid4().hex}{suffix}"

    def save(self, original_name: str, data: bytes) -> Path:
        path = self.upload_dir / self.generate_file_name(original_name)
        path.write_bytes(data)
        logger.info(f"Stored {len(data)} bytes at {path}")
        return path

    def exists(self, file_path: str) -> bool:
        return os.path.exists(file_path)

    def read(self, file_path: str) -> Optional[bytes]:
        """Return the file bytes, or None when the file is missing or unreadable."""
        try:
            return Path(file_path).read_bytes()
        except OSError as e:
            logger.warning(f"Could not read material file {file_path}: {e}")
            return None

    def delete(self, file_path: str) -> bool:
        try:
            os.remove(file_path)
            return True
        except FileNotFoundError:
            return False


_storage: Optional[MaterialStorage] = None


def get_storage() -> MaterialStorage:
    """Get or create the storage singleton."""
    global _storage
    if _storage is None:
        _storage = MaterialStorage(get_settings().upload_dir)
    return _storage
