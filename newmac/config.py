#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Optional

import logging
import sys

import yaml

from .exit_codes import ConfigError

LOG_FORMAT = "%(levelname)s: %(message)s"

logger = logging.getLogger("newmac")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def configure_logging(verbose: bool = False, level: Optional[str] = None,
                      fmt: str = LOG_FORMAT) -> None:
    """
    Configure the ``newmac`` logger.

    Verbose mode forces DEBUG so that every external command is traced.
    Calling this more than once replaces the previous handler.
    """
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(level or "INFO").upper(), logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(log_level)
    logger.propagate = False


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. NEWMAC_CONFIG environment variable
    2. ~/.newmac/ directory
    """
    if 'NEWMAC_CONFIG' in os.environ:
        path = Path(os.environ['NEWMAC_CONFIG']).expanduser()
        if path.exists():
            return path
        logger.warning(f"NEWMAC_CONFIG points to a missing file: {path}")

    newmac_dir = Path.home() / '.newmac'
    for filename in CONFIG_FILENAMES:
        path = newmac_dir / filename
        if path.exists():
            return path

    # No file: return the default location
    return newmac_dir / 'config.json'


def read_config_file(config_path: Path) -> dict:
    """Read a JSON, TOML or YAML config file into a dict."""
    suffix = config_path.suffix.lower()
    try:
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif suffix in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f)
        else:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return file_config


def load_config(config_path: Optional[Path] = None):
    """
    Load configuration.

    Defaults are merged with the config file (explicit path, NEWMAC_CONFIG,
    or ~/.newmac/config.*) and then with NEWMAC_* environment overrides.
    """
    config = get_default_config()

    if config_path is not None:
        config_path = Path(config_path).expanduser()
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Loading config from {config_path}")
        config = merge_configs(config, read_config_file(config_path))

    return apply_env_overrides(config)


def get_default_config():
    """Get default configuration."""
    return {
        "paths": {
            "config_dir": "~/.config",
            "ssh_key": "~/.ssh/id_ed25519",
            "venv_dir": "~/venvs",
            "repo_dir": "~/dots",
            "stow_target": "~",
            "shell_profile": "~/.zprofile",
        },
        "repository": {
            "url": "git@github.com:brycenicholls/dots.git",
        },
        "ssh": {
            "key_type": "ed25519",
            "comment": "",  # Empty: use the profile name
        },
        "formulae": {
            "common": [
                "ansible-language-server",
                "ansible-lint",
                "bat",
                "bat-extras",
                "eza",
                "fd",
                "fuzzy-find",
                "fzf",
                "lazygit",
                "lolcat",
                "luarocks",
                "neovim",
                "ripgrep",
                "rust",
                "starship",
                "stow",
                "tree",
                "tree-sitter",
                "wget",
                "zsh-autosuggestions",
                "zsh-syntax-highlighting",
            ],
            "work": ["google-chrome", "teleport"],
            "home": ["yt-dlp", "firefox"],
        },
        "casks": {
            "common": ["font-jetbrains-mono-nerd-font", "obsidian", "spotify"],
            "work": ["iterm2", "slack"],
            "home": ["utm", "wezterm"],
        },
        "symlinks": ["btop", "nvim", "starship.toml", "wezterm"],
        "preferences": {
            "iterm_profile": "~/dots/iterm2/profile.json",
            "color_scheme_url": "",
            "color_scheme_path": "~/.config/iterm2/colors.itermcolors",
        },
        "apps": {
            "dmg": [],  # [{"name": "App", "url": "https://..."}]
        },
        "logging": {
            "level": "INFO",
            "format": LOG_FORMAT,
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: NEWMAC_SECTION_SUBSECTION_KEY
    For example: NEWMAC_REPOSITORY_URL=git@example.com:me/dots.git
    """
    env_prefix = "NEWMAC_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config
