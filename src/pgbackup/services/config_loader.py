"""Configuration loader for pgbackup."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from pgbackup.errors import BackupError
from pgbackup.errors_catalog import actionable_error


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    KEY_TYPES = {
        "backup_dir": str,
        "db_host": str,
        "db_user": str,
        "db_password": str,
        "db_password_file": str,
        "connect_database": str,
        "rclone_remote": str,
        "rclone_path": str,
        "local_retention_days": int,
        "remote_retention_days": int,
        "compression_level": int,
        "rclone_binary": str,
        "verbose": bool,
        "log_file": str,
        "dry_run": bool,
    }

    TYPE_LABELS = {str: "a string", int: "an integer", bool: "true or false"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise BackupError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise BackupError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise BackupError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - set(self.KEY_TYPES))
        if unknown:
            unknown_list = ", ".join(unknown)
            raise BackupError(f"Unknown configuration keys: {unknown_list}")

        values = {key: value for key, value in parsed.items() if value is not None}
        for key, value in values.items():
            self._check_type(key, value)
        return values

    def _check_type(self, key: str, value: Any):
        expected = self.KEY_TYPES[key]
        # bool is an int subclass
        if expected is int:
            valid = isinstance(value, int) and not isinstance(value, bool)
        else:
            valid = isinstance(value, expected)

        if not valid:
            raise BackupError(
                f"Configuration key '{key}' must be {self.TYPE_LABELS[expected]}, "
                f"got {type(value).__name__}."
            )

    @staticmethod
    def read_password_file(password_file: str) -> str:
        try:
            return Path(password_file).read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise BackupError(
                actionable_error("password_file_unreadable", path=password_file)
            ) from exc
