from pgbackup.services.filesystem import FileSystemService


class DummyLogger:
    def warning(self, *_args, **_kwargs):
        return None


def test_ensure_dir_is_idempotent(tmp_path):
    service = FileSystemService(logger=DummyLogger())
    target = tmp_path / "backups" / "app"

    service.ensure_dir(str(target))
    service.ensure_dir(str(target))

    assert target.is_dir()


def test_file_size_returns_zero_for_missing_file(tmp_path):
    service = FileSystemService(logger=DummyLogger())

    assert service.file_size(str(tmp_path / "missing.sql.gz")) == 0


def test_human_size_formats_bytes():
    assert FileSystemService.human_size(1500) == "1.5 kB"
