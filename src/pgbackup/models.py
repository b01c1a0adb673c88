"""Shared domain models for pgbackup."""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pgbackup.constants import (
    DEFAULT_BACKUP_DIR,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_CONNECT_DATABASE,
    DEFAULT_DB_HOST,
    DEFAULT_DB_USER,
    DEFAULT_LOCAL_RETENTION_DAYS,
    DEFAULT_RCLONE_BINARY,
    DEFAULT_RCLONE_PATH,
    DEFAULT_RCLONE_REMOTE,
    DEFAULT_REMOTE_RETENTION_DAYS,
    DUMP_SUFFIX,
)
from pgbackup.errors import BackupError


@dataclass(frozen=True)
class BackupConfig:
    """Connection, layout and retention settings assembled once per run."""

    backup_dir: str = DEFAULT_BACKUP_DIR
    db_host: str = DEFAULT_DB_HOST
    db_user: str = DEFAULT_DB_USER
    db_password: str = field(default="", repr=False)
    connect_database: str = DEFAULT_CONNECT_DATABASE
    rclone_remote: str = DEFAULT_RCLONE_REMOTE
    rclone_path: str = DEFAULT_RCLONE_PATH
    local_retention_days: int = DEFAULT_LOCAL_RETENTION_DAYS
    remote_retention_days: int = DEFAULT_REMOTE_RETENTION_DAYS
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    rclone_binary: str = DEFAULT_RCLONE_BINARY

    def __post_init__(self):
        if self.local_retention_days < 1:
            raise BackupError("local_retention_days must be a positive number of days.")
        if self.remote_retention_days < 1:
            raise BackupError("remote_retention_days must be a positive number of days.")
        if not 1 <= self.compression_level <= 9:
            raise BackupError("compression_level must be between 1 and 9.")
        if not self.rclone_remote:
            raise BackupError("rclone_remote must not be empty.")

    def database_dir(self, database: str) -> str:
        return os.path.join(self.backup_dir, database)

    def artifact_path(self, database: str, timestamp: str) -> str:
        return os.path.join(self.database_dir(database), f"{database}_{timestamp}{DUMP_SUFFIX}")

    def remote_target(self, database: str) -> str:
        prefix = self.rclone_path.strip("/")
        path = f"{prefix}/{database}" if prefix else database
        return f"{self.rclone_remote}:{path}/"

    def pg_env(self, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Child environment for PostgreSQL client tools."""
        env = dict(os.environ if base is None else base)
        if self.db_password:
            env["PGPASSWORD"] = self.db_password
        return env


@dataclass(frozen=True)
class CommandOutcome:
    """Result of a single external tool invocation."""

    command: str
    returncode: int
    diagnostic: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class RunOutcome:
    """Counters accumulated across one run, used for the final report."""

    timestamp: str
    targets: List[str] = field(default_factory=list)
    succeeded: int = 0
    failed: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    total_bytes: int = 0
    uploaded: int = 0
    upload_failed: int = 0
    deleted: int = 0
    remote_cleaned: int = 0
    remote_failed: int = 0
    remote_skipped: bool = False

    def record_success(self, size: int):
        self.succeeded += 1
        self.total_bytes += size

    def record_failure(self, database: str, diagnostic: str):
        if database not in self.failures:
            self.failed.append(database)
        self.failures[database] = diagnostic

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
