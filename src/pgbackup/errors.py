"""Domain errors for pgbackup."""


class BackupError(RuntimeError):
    """Raised when the backup run cannot continue safely."""
