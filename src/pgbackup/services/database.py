"""PostgreSQL discovery and dump services for pgbackup."""

import gzip
import os
from typing import List, Optional

from pgbackup.constants import RESERVED_DATABASES
from pgbackup.errors import BackupError
from pgbackup.errors_catalog import actionable_error
from pgbackup.models import BackupConfig, CommandOutcome


class DatabaseService:
    """Lists backup-eligible databases and dumps them to compressed files."""

    def __init__(self, logger, command_runner):
        self.logger = logger
        self.command_runner = command_runner

    @staticmethod
    def build_list_query() -> str:
        reserved = ", ".join(f"'{name}'" for name in RESERVED_DATABASES)
        return (
            "SELECT datname FROM pg_database "
            "WHERE datistemplate = false "
            f"AND datname NOT IN ({reserved}) "
            "ORDER BY datname;"
        )

    @staticmethod
    def parse_database_list(output: str) -> List[str]:
        names: List[str] = []
        for line in output.splitlines():
            name = line.strip()
            if not name or name in RESERVED_DATABASES or name in names:
                continue
            names.append(name)
        return names

    @staticmethod
    def check_artifact(output_path: str) -> Optional[str]:
        """Returns why a compressed dump is unusable, or None when it holds data."""
        if not os.path.isfile(output_path):
            return f"Dump produced no output: {output_path}"

        try:
            with gzip.open(output_path, "rb") as file_obj:
                first_byte = file_obj.read(1)
        except (OSError, EOFError) as exc:
            return f"Dump is not a readable gzip stream: {output_path} ({exc})"

        if not first_byte:
            return f"Dump produced no output: {output_path}"
        return None

    def list_databases(self, config: BackupConfig) -> List[str]:
        cmd = [
            "psql",
            "-h",
            config.db_host,
            "-U",
            config.db_user,
            "-d",
            config.connect_database,
            "-t",
            "-A",
            "-c",
            self.build_list_query(),
        ]

        try:
            result = self.command_runner.run(
                cmd,
                check=True,
                capture_output=True,
                env=config.pg_env(),
            )
        except BackupError as exc:
            message = actionable_error(
                "discovery_failed",
                host=config.db_host,
                user=config.db_user,
                database=config.connect_database,
            )
            raise BackupError(f"{message}\n{exc}") from exc

        databases = self.parse_database_list(result.stdout or "")
        if not databases:
            raise BackupError(
                actionable_error("no_databases", host=config.db_host, user=config.db_user)
            )
        return databases

    def dump_database(self, config: BackupConfig, database: str, output_path: str) -> CommandOutcome:
        producer = ["pg_dump", "-h", config.db_host, "-U", config.db_user, database]
        consumer = ["gzip", f"-{config.compression_level}"]

        outcome = self.command_runner.run_pipeline(
            producer,
            consumer,
            output_path,
            env=config.pg_env(),
        )
        if not outcome.ok:
            return outcome

        problem = self.check_artifact(output_path)
        if problem:
            return CommandOutcome(command=outcome.command, returncode=1, diagnostic=problem)
        return outcome
