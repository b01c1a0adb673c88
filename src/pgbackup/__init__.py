"""
pgbackup - PostgreSQL dump, upload and retention tool
"""

__version__ = "0.1.0"

from .core import BackupRunner
from .errors import BackupError
from .models import BackupConfig

__all__ = ["BackupConfig", "BackupError", "BackupRunner"]
