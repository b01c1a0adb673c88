import pytest

from pgbackup.errors import BackupError
from pgbackup.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".pgbackup.yml"
    config_file.write_text(
        "db_host: db.internal\nrclone_remote: s3\nlocal_retention_days: 3\n",
        encoding="utf-8",
    )

    loader = ConfigLoader()
    loaded = loader.load(str(config_file))

    assert loaded["db_host"] == "db.internal"
    assert loaded["rclone_remote"] == "s3"
    assert loaded["local_retention_days"] == 3


def test_config_loader_returns_empty_mapping_without_path():
    assert ConfigLoader().load(None) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".pgbackup.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    loader = ConfigLoader()

    with pytest.raises(BackupError, match="Unknown configuration keys"):
        loader.load(str(config_file))


def test_config_loader_rejects_non_mapping_root(tmp_path):
    config_file = tmp_path / ".pgbackup.yml"
    config_file.write_text("- app\n- analytics\n", encoding="utf-8")

    with pytest.raises(BackupError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))


def test_config_loader_missing_file_raises(tmp_path):
    with pytest.raises(BackupError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))


def test_read_password_file_strips_whitespace(tmp_path):
    secret = tmp_path / "pg_password"
    secret.write_text("s3cret\n", encoding="utf-8")

    assert ConfigLoader.read_password_file(str(secret)) == "s3cret"


def test_read_password_file_missing_raises(tmp_path):
    with pytest.raises(BackupError, match="Could not read password file"):
        ConfigLoader.read_password_file(str(tmp_path / "missing"))


@pytest.mark.parametrize(
    "content,key",
    [
        ('dry_run: "false"\n', "dry_run"),
        ("local_retention_days: '7'\n", "local_retention_days"),
        ("compression_level: true\n", "compression_level"),
        ("db_host: [a, b]\n", "db_host"),
    ],
)
def test_config_loader_rejects_wrongly_typed_values(tmp_path, content, key):
    config_file = tmp_path / ".pgbackup.yml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(BackupError, match=f"Configuration key '{key}'"):
        ConfigLoader().load(str(config_file))


def test_config_loader_drops_empty_values(tmp_path):
    config_file = tmp_path / ".pgbackup.yml"
    config_file.write_text("db_password:\ndry_run: false\n", encoding="utf-8")

    assert ConfigLoader().load(str(config_file)) == {"dry_run": False}
