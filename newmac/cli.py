#!/usr/bin/env python3

import click
import logging
from pathlib import Path
from typing import Optional

from newmac.config import configure_logging, load_config
from newmac.cli_utils import standard_command
from newmac.domain import BootstrapSettings, Profile
from newmac.output import emit
from newmac.services import BootstrapService

logger = logging.getLogger("newmac")


def select_profile(work: bool, home: bool) -> Profile:
    """Turn the -w/-h flags into a Profile. Exactly one must be given."""
    if work and home:
        raise click.UsageError("Use either -w (for work) or -h (for home), not both.")
    if work:
        return Profile.WORK
    if home:
        return Profile.HOME
    raise click.UsageError("No use case specified. Use -w for work or -h for home.")


@click.command(context_settings={'help_option_names': ['--help']})
@click.option('-w', '--work', is_flag=True, help='Provision a work machine')
@click.option('-h', '--home', is_flag=True, help='Provision a home machine')
@click.option('-v', '--verbose', is_flag=True, help='Log every command before it runs')
@click.option('--dry-run', is_flag=True, help='Log commands without executing them')
@click.option('--status', 'status_only', is_flag=True,
              help='Report managed paths and symlinks, change nothing')
@click.option('--pretty', is_flag=True, help='Display results as a table')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Config file (default: $NEWMAC_CONFIG or ~/.newmac/config.*)')
@click.version_option()
@standard_command
def cli(work: bool, home: bool, verbose: bool, dry_run: bool, status_only: bool,
        pretty: bool, config_path: Optional[Path]):
    """newmac - Bootstrap a Mac from a work or home profile.

    Installs Homebrew and the declared formulae and casks, creates an SSH
    key, clones the dotfiles repository and stows its packages into
    ~/.config. Every step checks first, so re-running is safe.

    \b
    Examples:
        newmac -w              # provision a work machine
        newmac -h -v           # home machine, trace every command
        newmac -h --dry-run    # show what would happen
        newmac -w --status --pretty
    """
    profile = select_profile(work, home)

    configure_logging(verbose=verbose)
    config = load_config(config_path)
    log_config = config.get('logging', {})
    configure_logging(verbose=verbose, level=log_config.get('level'),
                      fmt=log_config.get('format') or '%(levelname)s: %(message)s')

    settings = BootstrapSettings.from_config(config, profile, verbose=verbose, dry_run=dry_run)
    service = BootstrapService.create(settings)

    if status_only:
        emit(service.status(), pretty=pretty, title=f"newmac status ({profile.value})")
        return

    mode = "[dry run] " if dry_run else ""
    logger.info(f"{mode}Provisioning {profile.value} machine")

    for progress in service.run():
        logger.info(f"{mode}{progress}")

    summary = service.last_result
    if pretty:
        emit(summary.details, pretty=True, title=f"newmac ({profile.value})")
    else:
        emit([*summary.details, summary])

    if summary.failed:
        logger.warning(f"{summary.failed} non-fatal step(s) failed: {'; '.join(summary.errors)}")


def main():
    cli()


if __name__ == "__main__":
    main()
