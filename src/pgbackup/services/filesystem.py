"""Filesystem helpers for pgbackup."""

import logging
import os

from rich.filesize import decimal

from pgbackup.errors import BackupError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def ensure_dir(self, path: str):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as exc:
            raise BackupError(f"Could not create directory {path}: {exc}") from exc

    def file_size(self, path: str) -> int:
        try:
            return os.path.getsize(path)
        except OSError as exc:
            self.logger.warning("Could not read size of %s: %s", path, exc)
            return 0

    @staticmethod
    def human_size(size: int) -> str:
        return decimal(size)
