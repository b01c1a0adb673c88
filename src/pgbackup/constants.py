"""Shared constants for pgbackup."""

RESERVED_DATABASES = ("postgres", "template0", "template1")

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DUMP_SUFFIX = ".sql.gz"

DEFAULT_BACKUP_DIR = "/backups"
DEFAULT_DB_HOST = "postgres"
DEFAULT_DB_USER = "n8n_user"
DEFAULT_CONNECT_DATABASE = "n8n_db"
DEFAULT_RCLONE_REMOTE = "gdrive"
DEFAULT_RCLONE_PATH = "postgres-backups"
DEFAULT_RCLONE_BINARY = "rclone"
DEFAULT_LOCAL_RETENTION_DAYS = 7
DEFAULT_REMOTE_RETENTION_DAYS = 30
DEFAULT_COMPRESSION_LEVEL = 9

SECONDS_PER_DAY = 86400

# Remote objects matching these patterns survive the retention sweep.
REMOTE_CLEANUP_EXCLUDES = ("*.lock",)
