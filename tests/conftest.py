"""
Shared fixtures: recording fakes for the package manager and the
command runner, so no test touches brew, git, stow or ssh-keygen.
"""

import logging
import os
from pathlib import Path

import pytest

from newmac.config import get_default_config
from newmac.domain import BootstrapSettings, PackageKind, Profile
from newmac.infra.command import CmdResult, CommandRunner
from newmac.infra.host import Capability, HostCapabilities


class FakePackageManager:
    """PackageManager stub that records every call."""

    def __init__(self, available=True, installed=None, fail_install=(),
                 install_self_ok=True, update_ok=True, cleanup_ok=True):
        self.available = available
        self.installed = {
            PackageKind.FORMULA: set((installed or {}).get(PackageKind.FORMULA, ())),
            PackageKind.CASK: set((installed or {}).get(PackageKind.CASK, ())),
        }
        self.fail_install = set(fail_install)
        self.install_self_ok = install_self_ok
        self.update_ok = update_ok
        self.cleanup_ok = cleanup_ok
        self.calls = []

    def installs(self):
        return [c for c in self.calls if c[0] == 'install']

    def is_available(self):
        self.calls.append(('is_available',))
        return self.available

    def install_self(self):
        self.calls.append(('install_self',))
        if self.install_self_ok:
            self.available = True
        return self.install_self_ok

    def activate(self, shell_profile):
        self.calls.append(('activate', Path(shell_profile)))

    def update(self):
        self.calls.append(('update',))
        return self.update_ok

    def is_installed(self, name, kind):
        self.calls.append(('is_installed', name, kind))
        return name in self.installed[kind]

    def install(self, name, kind):
        self.calls.append(('install', name, kind))
        if name in self.fail_install:
            return CmdResult(argv=('brew', 'install', name), returncode=1, stderr='boom')
        self.installed[kind].add(name)
        return CmdResult(argv=('brew', 'install', name), returncode=0)

    def cleanup(self):
        self.calls.append(('cleanup',))
        return self.cleanup_ok


class FakeRunner(CommandRunner):
    """CommandRunner that records argv instead of running anything.

    `returncodes` maps a program name (basename of argv[0]) to its exit code;
    `outputs` maps it to stdout. `side_effects` maps a program name to a
    callable invoked with argv, used to emulate what the tool would create.
    """

    def __init__(self, returncodes=None, outputs=None, side_effects=None, dry_run=False):
        super().__init__(dry_run=dry_run)
        self.returncodes = returncodes or {}
        self.outputs = outputs or {}
        self.side_effects = side_effects or {}
        self.commands = []
        self.kwargs = []

    def run(self, argv, cwd=None, env=None, input_text=None, mutating=True):
        argv = tuple(str(a) for a in argv)
        self.commands.append(argv)
        self.kwargs.append({'cwd': cwd, 'env': env, 'input_text': input_text})
        program = os.path.basename(argv[0])
        code = self.returncodes.get(program, 0)
        if code == 0 and program in self.side_effects:
            self.side_effects[program](argv)
        return CmdResult(argv=argv, returncode=code, stdout=self.outputs.get(program, ''))

    def programs(self):
        return [os.path.basename(argv[0]) for argv in self.commands]


@pytest.fixture
def fake_manager():
    return FakePackageManager()


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def settings(tmp_path, config):
    """Home-profile settings rooted at a temporary home directory."""
    return BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)


@pytest.fixture
def macos_host():
    return HostCapabilities(
        system="Darwin",
        machine="arm64",
        capabilities=frozenset({Capability.MACOS, Capability.OSASCRIPT, Capability.HDIUTIL}),
    )


@pytest.fixture
def linux_host():
    return HostCapabilities(system="Linux", machine="x86_64")


@pytest.fixture
def make_runner():
    """Factory for FakeRunner with custom return codes and outputs."""
    return FakeRunner


@pytest.fixture
def make_manager():
    """Factory for FakePackageManager with custom state."""
    return FakePackageManager


def _drain(generator):
    messages = []
    while True:
        try:
            messages.append(next(generator))
        except StopIteration as stop:
            return messages, stop.value


@pytest.fixture
def drain():
    """Run a progress generator to completion: returns (messages, result)."""
    return _drain


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers a test installed on the newmac logger."""
    yield
    logger = logging.getLogger('newmac')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
