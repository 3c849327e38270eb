"""
Tests for WorkspaceService: SSH key, dotfiles clone and directories.
"""

import dataclasses
import stat
from pathlib import Path

import pytest

from newmac.domain import StepStatus
from newmac.exit_codes import CloneError, DirectoryError, KeygenError
from newmac.infra import GitClient, KeygenClient
from newmac.services import WorkspaceService


def write_key(argv):
    """Emulate ssh-keygen writing the key pair named after -f."""
    path = Path(argv[argv.index('-f') + 1])
    path.write_text('private')
    path.with_suffix('.pub').write_text('public')


def make_service(settings, runner):
    return WorkspaceService(settings, GitClient(runner), KeygenClient(runner))


class TestEnsureSshKey:
    """Tests for WorkspaceService.ensure_ssh_key."""

    def test_generates_missing_key(self, settings, make_runner, drain):
        runner = make_runner(side_effects={'ssh-keygen': write_key})

        _, result = drain(make_service(settings, runner).ensure_ssh_key())

        key = settings.ssh_key_path
        assert runner.commands == [
            ('ssh-keygen', '-t', 'ed25519', '-f', str(key), '-N', '', '-C', 'home')
        ]
        assert result.status is StepStatus.SUCCESS
        assert key.is_file()
        assert stat.S_IMODE(key.parent.stat().st_mode) == 0o700

    def test_existing_key_untouched(self, settings, fake_runner, drain):
        key = settings.ssh_key_path
        key.parent.mkdir(parents=True)
        key.write_text('original')

        messages, result = drain(make_service(settings, fake_runner).ensure_ssh_key())

        assert fake_runner.commands == []
        assert result.status is StepStatus.SKIPPED
        assert key.read_text() == 'original'
        assert messages == [f"ED25519 SSH key already exists at {key}."]

    def test_keygen_failure_is_error(self, settings, make_runner, drain):
        runner = make_runner(returncodes={'ssh-keygen': 1})
        with pytest.raises(KeygenError):
            drain(make_service(settings, runner).ensure_ssh_key())

    def test_directory_in_place_of_key(self, settings, fake_runner, drain):
        settings.ssh_key_path.mkdir(parents=True)
        with pytest.raises(KeygenError):
            drain(make_service(settings, fake_runner).ensure_ssh_key())
        assert fake_runner.commands == []

    def test_second_run_does_not_regenerate(self, settings, make_runner, drain):
        runner = make_runner(side_effects={'ssh-keygen': write_key})
        service = make_service(settings, runner)

        drain(service.ensure_ssh_key())
        drain(service.ensure_ssh_key())

        assert runner.programs() == ['ssh-keygen']

    def test_dry_run_creates_nothing(self, settings, make_runner, drain):
        settings = dataclasses.replace(settings, dry_run=True)
        runner = make_runner(dry_run=True)

        _, result = drain(make_service(settings, runner).ensure_ssh_key())

        assert result.status is StepStatus.DRY_RUN
        assert not settings.ssh_key_path.parent.exists()


class TestEnsureRepository:
    """Tests for WorkspaceService.ensure_repository."""

    def test_clones_missing_repo(self, settings, fake_runner, drain):
        _, result = drain(make_service(settings, fake_runner).ensure_repository())

        assert fake_runner.commands == [
            ('git', 'clone', settings.repo_url, str(settings.repo_dir))
        ]
        assert result.action == "cloned"

    def test_existing_repo_not_pulled(self, settings, fake_runner, drain):
        settings.repo_dir.mkdir()

        _, result = drain(make_service(settings, fake_runner).ensure_repository())

        assert fake_runner.commands == []
        assert result.status is StepStatus.SKIPPED

    def test_clone_failure(self, settings, make_runner, drain):
        runner = make_runner(returncodes={'git': 128})
        with pytest.raises(CloneError):
            drain(make_service(settings, runner).ensure_repository())


class TestEnsureDirectory:
    def test_creates_venv_dir(self, settings, fake_runner, drain):
        _, result = drain(make_service(settings, fake_runner).ensure_venv_dir())

        assert settings.venv_dir.is_dir()
        assert result.step == "venv_dir"
        assert result.status is StepStatus.SUCCESS

    def test_existing_dir_skipped(self, settings, fake_runner, drain):
        settings.venv_dir.mkdir()
        _, result = drain(make_service(settings, fake_runner).ensure_venv_dir())
        assert result.status is StepStatus.SKIPPED

    def test_file_in_the_way(self, settings, fake_runner, drain):
        settings.venv_dir.write_text('not a directory')
        with pytest.raises(DirectoryError):
            drain(make_service(settings, fake_runner).ensure_venv_dir())

    def test_dry_run(self, settings, fake_runner, drain):
        settings = dataclasses.replace(settings, dry_run=True)
        _, result = drain(make_service(settings, fake_runner).ensure_venv_dir())
        assert result.status is StepStatus.DRY_RUN
        assert not settings.venv_dir.exists()
