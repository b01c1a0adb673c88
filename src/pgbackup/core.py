import logging
import os
from datetime import datetime
from typing import Callable, List, Optional

from .constants import TIMESTAMP_FORMAT
from .errors import BackupError
from .errors_catalog import actionable_error
from .models import BackupConfig, RunOutcome
from .services.command_runner import CommandRunner
from .services.database import DatabaseService
from .services.filesystem import FileSystemService
from .services.remote import RemoteStorageService
from .services.retention import LocalRetentionService

logger = logging.getLogger("pgbackup")

DIVIDER = "=" * 42


class BackupRunner:
    """Discovers, dumps, uploads and prunes PostgreSQL backups in one pass."""

    def __init__(
        self,
        config: BackupConfig,
        dry_run: bool = False,
        command_runner: Optional[CommandRunner] = None,
        database_service: Optional[DatabaseService] = None,
        remote_service: Optional[RemoteStorageService] = None,
        retention_service: Optional[LocalRetentionService] = None,
        filesystem_service: Optional[FileSystemService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.dry_run = dry_run
        self.clock = clock or datetime.now
        self.outcome: Optional[RunOutcome] = None

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.database_service = database_service or DatabaseService(
            logger=logger,
            command_runner=self.command_runner,
        )
        self.remote_service = remote_service or RemoteStorageService(
            logger=logger,
            command_runner=self.command_runner,
            binary=config.rclone_binary,
        )
        self.retention_service = retention_service or LocalRetentionService(logger=logger)
        self.filesystem_service = filesystem_service or FileSystemService(logger=logger)

    def discover(self) -> List[str]:
        logger.info("Fetching database list from %s...", self.config.db_host)
        databases = self.database_service.list_databases(self.config)
        logger.info("Found %s database(s) to backup", len(databases))
        logger.info("Databases: %s", " ".join(databases))
        return databases

    def dump_all(self, databases: List[str], outcome: RunOutcome):
        for database in databases:
            database_dir = self.config.database_dir(database)
            backup_file = self.config.artifact_path(database, outcome.timestamp)
            logger.info("Backing up database: %s", database)

            try:
                self.filesystem_service.ensure_dir(database_dir)
            except BackupError as exc:
                logger.error("  Failed to backup %s: %s", database, exc)
                outcome.record_failure(database, str(exc))
                continue

            result = self.database_service.dump_database(self.config, database, backup_file)
            if result.ok:
                size = self.filesystem_service.file_size(backup_file)
                outcome.record_success(size)
                logger.info(
                    "  Backup created: %s (%s)",
                    backup_file,
                    self.filesystem_service.human_size(size),
                )
            else:
                logger.error(
                    actionable_error("dump_failed", database=database, user=self.config.db_user)
                )
                if result.diagnostic:
                    logger.error("  %s", result.diagnostic)
                outcome.record_failure(database, result.diagnostic or result.command)

        logger.info(DIVIDER)
        logger.info("Backup phase complete")
        logger.info("Successful: %s/%s", outcome.succeeded, len(databases))
        if outcome.failed:
            logger.info("Failed: %s", " ".join(outcome.failed))
        logger.info("Total backup size: %sMB", outcome.total_bytes // 1024 // 1024)
        logger.info(DIVIDER)

    def upload_all(self, databases: List[str], outcome: RunOutcome):
        logger.info("Uploading backups to %s...", self.config.rclone_remote)

        for database in databases:
            database_dir = self.config.database_dir(database)
            if not os.path.isdir(database_dir):
                logger.debug("No local directory for %s, skipping upload.", database)
                continue

            result = self.remote_service.copy_directory(
                database_dir,
                self.config.remote_target(database),
            )
            if result.ok:
                logger.info("  Uploaded %s backups to %s", database, self.config.remote_target(database))
                outcome.uploaded += 1
            else:
                logger.error("  Failed to upload %s: %s", database, result.diagnostic or result.command)
                outcome.upload_failed += 1

        logger.info(DIVIDER)
        logger.info("Upload phase complete")
        logger.info("Successful uploads: %s", outcome.uploaded)
        if outcome.upload_failed:
            logger.info("Failed uploads: %s", outcome.upload_failed)
        logger.info(DIVIDER)

    def prune_local(self, databases: List[str], outcome: RunOutcome, now: Optional[float] = None):
        days = self.config.local_retention_days
        logger.info("Cleaning up local backups older than %s days...", days)

        for database in databases:
            deleted = self.retention_service.prune(
                self.config.database_dir(database),
                database,
                days,
                now=now,
            )
            if deleted:
                logger.info("  Deleted %s old backup(s) from %s", len(deleted), database)
                outcome.deleted += len(deleted)

        if outcome.deleted:
            logger.info("Total local backups deleted: %s", outcome.deleted)
        else:
            logger.info("No local backups older than %s days to delete", days)

    def prune_remote(self, databases: List[str], outcome: RunOutcome):
        days = self.config.remote_retention_days
        logger.info("Cleaning up %s backups older than %s days...", self.config.rclone_remote, days)

        for database in databases:
            result = self.remote_service.delete_older_than(self.config.remote_target(database), days)
            if result.ok:
                logger.info("  Cleaned up old remote backups for %s", database)
                outcome.remote_cleaned += 1
            else:
                logger.warning(
                    "  Remote cleanup failed for %s: %s",
                    database,
                    result.diagnostic or result.command,
                )
                outcome.remote_failed += 1

        if outcome.remote_cleaned:
            logger.info("Remote cleanup complete for %s database(s)", outcome.remote_cleaned)

    def plan(self, databases: List[str], outcome: RunOutcome):
        logger.info("Dry run: no dumps, uploads or deletions will be performed.")
        for database in databases:
            logger.info(
                "  %s -> %s -> %s",
                database,
                self.config.artifact_path(database, outcome.timestamp),
                self.config.remote_target(database),
            )

    def run(self) -> int:
        outcome = RunOutcome(timestamp=self.clock().strftime(TIMESTAMP_FORMAT))

        try:
            logger.info(DIVIDER)
            logger.info("Starting PostgreSQL backup")
            logger.info("Backup timestamp: %s", outcome.timestamp)
            logger.info("User: %s", self.config.db_user)
            logger.info("Host: %s", self.config.db_host)
            logger.info(DIVIDER)

            if self.config.remote_retention_days <= self.config.local_retention_days:
                logger.warning(
                    "Remote retention (%s days) is not longer than local retention (%s days).",
                    self.config.remote_retention_days,
                    self.config.local_retention_days,
                )

            databases = self.discover()
            outcome.targets = list(databases)
            logger.info(DIVIDER)

            if self.dry_run:
                self.plan(databases, outcome)
                return 0

            self.filesystem_service.ensure_dir(self.config.backup_dir)
            self.dump_all(databases, outcome)

            if self.remote_service.is_available():
                self.upload_all(databases, outcome)
                self.prune_local(databases, outcome)
                self.prune_remote(databases, outcome)
                logger.info(DIVIDER)
                logger.info("Backup and cleanup completed")
                logger.info(DIVIDER)
            else:
                outcome.remote_skipped = True
                logger.warning(
                    actionable_error(
                        "remote_unavailable",
                        binary=self.remote_service.binary,
                        backup_dir=self.config.backup_dir,
                    )
                )
                logger.info(DIVIDER)

            if outcome.failed:
                logger.error("Some database backups failed: %s", " ".join(outcome.failed))
            return outcome.exit_code

        except KeyboardInterrupt:
            logger.error("Operation cancelled by user.")
            return 1
        except BackupError as exc:
            logger.error(str(exc))
            return 1
        finally:
            self.outcome = outcome
