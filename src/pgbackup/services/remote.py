"""rclone-backed remote storage service for pgbackup."""

import shutil
from typing import List

from pgbackup.constants import REMOTE_CLEANUP_EXCLUDES
from pgbackup.models import CommandOutcome


class RemoteStorageService:
    """Copies dump directories to an rclone remote and prunes old objects there."""

    def __init__(self, logger, command_runner, binary: str = "rclone"):
        self.logger = logger
        self.command_runner = command_runner
        self.binary = binary

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def copy_directory(self, local_dir: str, remote_target: str) -> CommandOutcome:
        return self.command_runner.attempt([self.binary, "copy", local_dir, remote_target])

    def build_delete_cmd(self, remote_target: str, min_age_days: int) -> List[str]:
        cmd = [self.binary, "delete", remote_target, "--min-age", f"{min_age_days}d"]
        for pattern in REMOTE_CLEANUP_EXCLUDES:
            cmd.extend(["--exclude", pattern])
        return cmd

    def delete_older_than(self, remote_target: str, min_age_days: int) -> CommandOutcome:
        return self.command_runner.attempt(self.build_delete_cmd(remote_target, min_age_days))
