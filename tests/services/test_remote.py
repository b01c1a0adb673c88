import pytest

import pgbackup.services.remote as remote_module
from pgbackup.models import CommandOutcome
from pgbackup.services.remote import RemoteStorageService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class RecordingRunner:
    def __init__(self, returncode=0):
        self.returncode = returncode
        self.commands = []

    def attempt(self, cmd, env=None):
        self.commands.append(cmd)
        return CommandOutcome(command=" ".join(cmd), returncode=self.returncode)


@pytest.mark.parametrize("resolved,expected", [("/usr/bin/rclone", True), (None, False)])
def test_is_available_checks_path(monkeypatch, resolved, expected):
    monkeypatch.setattr(remote_module.shutil, "which", lambda _name: resolved)
    service = RemoteStorageService(logger=DummyLogger(), command_runner=RecordingRunner())

    assert service.is_available() is expected


def test_copy_directory_runs_rclone_copy():
    runner = RecordingRunner()
    service = RemoteStorageService(logger=DummyLogger(), command_runner=runner, binary="rclone")

    outcome = service.copy_directory("/backups/app", "gdrive:postgres-backups/app/")

    assert outcome.ok
    assert runner.commands == [["rclone", "copy", "/backups/app", "gdrive:postgres-backups/app/"]]


def test_delete_older_than_uses_min_age_and_excludes_locks():
    runner = RecordingRunner(returncode=1)
    service = RemoteStorageService(logger=DummyLogger(), command_runner=runner)

    outcome = service.delete_older_than("gdrive:postgres-backups/app/", 30)

    assert not outcome.ok
    assert runner.commands == [
        [
            "rclone",
            "delete",
            "gdrive:postgres-backups/app/",
            "--min-age",
            "30d",
            "--exclude",
            "*.lock",
        ]
    ]
