"""
Tests for BootstrapSettings and the profile/package domain types.
"""

import dataclasses

import pytest

from newmac.config import get_default_config
from newmac.domain import (
    BootstrapSettings,
    DmgApp,
    PackageKind,
    Profile,
    merge_package_lists,
)
from newmac.exit_codes import ConfigError


class TestProfile:
    """Tests for Profile and PackageKind enums."""

    def test_values(self):
        assert Profile("work") is Profile.WORK
        assert Profile("home") is Profile.HOME

    def test_unknown_profile(self):
        with pytest.raises(ValueError):
            Profile("office")

    def test_package_kind_plural(self):
        assert PackageKind.FORMULA.plural == "formulae"
        assert PackageKind.CASK.plural == "casks"


class TestMergePackageLists:
    """Tests for merge_package_lists."""

    def test_keeps_order(self):
        assert merge_package_lists(['a', 'b'], ['c']) == ('a', 'b', 'c')

    def test_drops_duplicates(self):
        assert merge_package_lists(['a', 'b'], ['b', 'c', 'a']) == ('a', 'b', 'c')

    def test_empty(self):
        assert merge_package_lists([], []) == ()


class TestFromConfig:
    """Tests for BootstrapSettings.from_config."""

    def test_home_profile_packages(self, tmp_path):
        settings = BootstrapSettings.from_config(get_default_config(), Profile.HOME, home=tmp_path)

        assert settings.formulae[0] == 'ansible-language-server'
        assert settings.formulae[-2:] == ('yt-dlp', 'firefox')
        assert 'teleport' not in settings.formulae
        assert settings.casks == (
            'font-jetbrains-mono-nerd-font', 'obsidian', 'spotify', 'utm', 'wezterm'
        )

    def test_work_profile_packages(self, tmp_path):
        settings = BootstrapSettings.from_config(get_default_config(), Profile.WORK, home=tmp_path)

        assert settings.formulae[-2:] == ('google-chrome', 'teleport')
        assert settings.casks[-2:] == ('iterm2', 'slack')
        assert settings.packages(PackageKind.CASK) == settings.casks

    def test_paths_are_absolute(self, tmp_path):
        settings = BootstrapSettings.from_config(get_default_config(), Profile.HOME, home=tmp_path)
        home = settings.home

        assert settings.config_dir == home / '.config'
        assert settings.ssh_key_path == home / '.ssh' / 'id_ed25519'
        assert settings.venv_dir == home / 'venvs'
        assert settings.repo_dir == home / 'dots'
        assert settings.stow_target == home
        assert settings.shell_profile == home / '.zprofile'
        for path in (settings.config_dir, settings.ssh_key_path, settings.repo_dir):
            assert path.is_absolute()

    def test_relative_path_resolved_against_home(self, tmp_path):
        config = get_default_config()
        config['paths']['venv_dir'] = 'code/venvs'

        settings = BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

        assert settings.venv_dir == settings.home / 'code' / 'venvs'

    def test_absolute_path_kept(self, tmp_path):
        config = get_default_config()
        config['paths']['repo_dir'] = str(tmp_path / 'elsewhere')

        settings = BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

        assert str(settings.repo_dir) == str(tmp_path / 'elsewhere')

    def test_settings_are_frozen(self, settings):
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.repo_url = 'changed'

    def test_key_comment_defaults_to_profile(self, tmp_path):
        settings = BootstrapSettings.from_config(get_default_config(), Profile.WORK, home=tmp_path)
        assert settings.key_comment == 'work'

    def test_key_comment_from_config(self, tmp_path):
        config = get_default_config()
        config['ssh']['comment'] = 'me@laptop'
        settings = BootstrapSettings.from_config(config, Profile.WORK, home=tmp_path)
        assert settings.key_comment == 'me@laptop'

    def test_flags_carried(self, tmp_path):
        settings = BootstrapSettings.from_config(
            get_default_config(), Profile.HOME, verbose=True, dry_run=True, home=tmp_path
        )
        assert settings.verbose is True
        assert settings.dry_run is True

    def test_dmg_apps(self, tmp_path):
        config = get_default_config()
        config['apps']['dmg'] = [{'name': 'Tool', 'url': 'https://example.com/Tool.dmg'}]

        settings = BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

        assert settings.dmg_apps == (DmgApp('Tool', 'https://example.com/Tool.dmg'),)

    def test_invalid_dmg_app(self, tmp_path):
        config = get_default_config()
        config['apps']['dmg'] = [{'name': 'Tool'}]
        with pytest.raises(ConfigError):
            BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

    def test_missing_repo_url(self, tmp_path):
        config = get_default_config()
        config['repository']['url'] = ''
        with pytest.raises(ConfigError):
            BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

    def test_missing_path(self, tmp_path):
        config = get_default_config()
        del config['paths']['ssh_key']
        with pytest.raises(ConfigError):
            BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

    def test_package_list_must_be_list(self, tmp_path):
        config = get_default_config()
        config['formulae']['home'] = 'firefox'
        with pytest.raises(ConfigError):
            BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)

    def test_missing_profile_list_is_empty(self, tmp_path):
        config = get_default_config()
        del config['casks']['home']
        settings = BootstrapSettings.from_config(config, Profile.HOME, home=tmp_path)
        assert settings.casks == ('font-jetbrains-mono-nerd-font', 'obsidian', 'spotify')

