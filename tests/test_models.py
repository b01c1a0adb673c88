import pytest

from pgbackup.errors import BackupError
from pgbackup.models import BackupConfig, CommandOutcome, RunOutcome


def test_default_remote_window_is_longer_than_local_window():
    config = BackupConfig()

    assert config.local_retention_days == 7
    assert config.remote_retention_days == 30
    assert config.remote_retention_days > config.local_retention_days


def test_artifact_path_encodes_database_and_timestamp():
    config = BackupConfig(backup_dir="/backups")

    assert config.artifact_path("app", "20240101_020000") == "/backups/app/app_20240101_020000.sql.gz"


@pytest.mark.parametrize(
    "path,expected",
    [
        ("postgres-backups", "gdrive:postgres-backups/app/"),
        ("/nested/prefix/", "gdrive:nested/prefix/app/"),
        ("", "gdrive:app/"),
    ],
)
def test_remote_target_namespaces_by_database(path, expected):
    assert BackupConfig(rclone_path=path).remote_target("app") == expected


def test_config_rejects_non_positive_retention():
    with pytest.raises(BackupError, match="local_retention_days"):
        BackupConfig(local_retention_days=0)


def test_config_rejects_invalid_compression_level():
    with pytest.raises(BackupError, match="compression_level"):
        BackupConfig(compression_level=10)


def test_pg_env_sets_password_only_when_present():
    assert BackupConfig(db_password="secret").pg_env(base={})["PGPASSWORD"] == "secret"
    assert "PGPASSWORD" not in BackupConfig().pg_env(base={})


def test_password_is_hidden_from_repr():
    assert "secret" not in repr(BackupConfig(db_password="secret"))


def test_command_outcome_ok():
    assert CommandOutcome(command="rclone copy", returncode=0).ok
    assert not CommandOutcome(command="rclone copy", returncode=1).ok


def test_run_outcome_records_each_failure_once():
    outcome = RunOutcome(timestamp="20240101_000000")

    outcome.record_failure("app", "first")
    outcome.record_failure("app", "second")
    outcome.record_success(100)

    assert outcome.failed == ["app"]
    assert outcome.failures["app"] == "second"
    assert outcome.total_bytes == 100
    assert outcome.exit_code == 1
