"""Local retention sweep for pgbackup."""

import os
import time
from typing import List, Optional

from pgbackup.constants import DUMP_SUFFIX, SECONDS_PER_DAY


class LocalRetentionService:
    """Deletes a database's dump files once they reach the retention age."""

    def __init__(self, logger):
        self.logger = logger

    @staticmethod
    def age_in_days(mtime: float, now: float) -> int:
        return int(max(0.0, now - mtime) // SECONDS_PER_DAY)

    @staticmethod
    def matches(file_name: str, database: str) -> bool:
        return file_name.startswith(f"{database}_") and file_name.endswith(DUMP_SUFFIX)

    def prune(
        self,
        directory: str,
        database: str,
        retention_days: int,
        now: Optional[float] = None,
    ) -> List[str]:
        """Removes matching files aged ``retention_days`` or more and returns their paths."""
        if not os.path.isdir(directory):
            return []

        now = time.time() if now is None else now
        deleted: List[str] = []

        try:
            with os.scandir(directory) as entries:
                candidates = sorted(
                    (entry for entry in entries if entry.is_file() and self.matches(entry.name, database)),
                    key=lambda entry: entry.name,
                )
        except OSError as exc:
            self.logger.warning("Could not list %s: %s", directory, exc)
            return []

        for entry in candidates:
            try:
                age = self.age_in_days(entry.stat().st_mtime, now)
            except OSError as exc:
                self.logger.warning("Could not stat %s: %s", entry.path, exc)
                continue

            if age < retention_days:
                continue

            try:
                os.remove(entry.path)
            except OSError as exc:
                self.logger.warning("Could not remove %s: %s", entry.path, exc)
                continue

            self.logger.debug("Removed %s (%s day(s) old)", entry.path, age)
            deleted.append(entry.path)

        return deleted
