"""
Bootstrap settings for newmac.

Settings are built once from the parsed command line and the loaded
configuration, then passed explicitly to every service.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from ..exit_codes import ConfigError


class Profile(Enum):
    """Which machine flavour is being provisioned."""
    WORK = "work"
    HOME = "home"


class PackageKind(Enum):
    """Homebrew package category."""
    FORMULA = "formula"
    CASK = "cask"

    @property
    def plural(self) -> str:
        return "formulae" if self is PackageKind.FORMULA else "casks"


@dataclass(frozen=True)
class DmgApp:
    """An application installed from a downloaded disk image."""
    name: str
    url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DmgApp':
        try:
            return cls(name=str(data['name']), url=str(data['url']))
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid dmg app entry {data!r}: needs 'name' and 'url'") from e


def merge_package_lists(*lists: Iterable[str]) -> Tuple[str, ...]:
    """Concatenate package lists in order, keeping the first occurrence of each name."""
    seen = set()
    merged = []
    for names in lists:
        for name in names:
            if name not in seen:
                seen.add(name)
                merged.append(name)
    return tuple(merged)


def _resolve_path(value: str, home: Path) -> Path:
    """Expand ``~`` against ``home`` and make the path absolute."""
    text = str(value)
    if text == '~':
        return home
    if text.startswith('~/'):
        return home / text[2:]
    path = Path(text)
    if not path.is_absolute():
        path = home / path
    return path


def _profile_list(section: Dict[str, Any], profile: Profile, label: str) -> Tuple[str, ...]:
    if not isinstance(section, dict):
        raise ConfigError(f"'{label}' must be a table with 'common', 'work' and 'home' lists")
    common = section.get('common') or []
    specific = section.get(profile.value) or []
    for names in (common, specific):
        if isinstance(names, str) or not isinstance(names, (list, tuple)):
            raise ConfigError(f"'{label}' entries must be lists of package names")
    return merge_package_lists(common, specific)


@dataclass(frozen=True)
class BootstrapSettings:
    """
    Immutable settings for one bootstrap run.

    All paths are absolute. Package lists are the common list followed by
    the profile-specific list.
    """
    profile: Profile
    home: Path
    config_dir: Path
    ssh_key_path: Path
    venv_dir: Path
    repo_url: str
    repo_dir: Path
    stow_target: Path
    shell_profile: Path
    ssh_key_type: str = "ed25519"
    ssh_key_comment: str = ""
    formulae: Tuple[str, ...] = ()
    casks: Tuple[str, ...] = ()
    symlinks: Tuple[str, ...] = ()
    iterm_profile_path: Optional[Path] = None
    color_scheme_url: str = ""
    color_scheme_path: Optional[Path] = None
    dmg_apps: Tuple[DmgApp, ...] = field(default_factory=tuple)
    verbose: bool = False
    dry_run: bool = False

    @property
    def key_comment(self) -> str:
        """Comment embedded in the generated public key."""
        return self.ssh_key_comment or self.profile.value

    def packages(self, kind: PackageKind) -> Tuple[str, ...]:
        return self.formulae if kind is PackageKind.FORMULA else self.casks

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        profile: Profile,
        verbose: bool = False,
        dry_run: bool = False,
        home: Optional[Path] = None,
    ) -> 'BootstrapSettings':
        """Build settings from a loaded configuration dict."""
        home = Path(home or Path.home()).expanduser().resolve()
        paths = config.get('paths', {})
        prefs = config.get('preferences', {})

        def path(key: str, section: Dict[str, Any] = paths) -> Optional[Path]:
            value = section.get(key)
            return _resolve_path(value, home) if value else None

        for key in ('config_dir', 'ssh_key', 'venv_dir', 'repo_dir', 'stow_target', 'shell_profile'):
            if not paths.get(key):
                raise ConfigError(f"Missing required path: paths.{key}")

        repo_url = config.get('repository', {}).get('url')
        if not repo_url:
            raise ConfigError("Missing required setting: repository.url")

        symlinks = config.get('symlinks') or []
        if isinstance(symlinks, str):
            raise ConfigError("'symlinks' must be a list of stow package names")

        ssh = config.get('ssh', {})
        dmg_apps = tuple(DmgApp.from_dict(app) for app in config.get('apps', {}).get('dmg') or [])

        return cls(
            profile=profile,
            home=home,
            config_dir=path('config_dir'),
            ssh_key_path=path('ssh_key'),
            venv_dir=path('venv_dir'),
            repo_url=str(repo_url),
            repo_dir=path('repo_dir'),
            stow_target=path('stow_target'),
            shell_profile=path('shell_profile'),
            ssh_key_type=str(ssh.get('key_type') or 'ed25519'),
            ssh_key_comment=str(ssh.get('comment') or ''),
            formulae=_profile_list(config.get('formulae', {}), profile, 'formulae'),
            casks=_profile_list(config.get('casks', {}), profile, 'casks'),
            symlinks=tuple(str(name) for name in symlinks),
            iterm_profile_path=path('iterm_profile', prefs),
            color_scheme_url=str(prefs.get('color_scheme_url') or ''),
            color_scheme_path=path('color_scheme_path', prefs),
            dmg_apps=dmg_apps,
            verbose=verbose,
            dry_run=dry_run,
        )
