"""
Preferences service for newmac.

macOS-only terminal preferences: importing the iTerm2 profile and fetching
the colour scheme. Failures here are reported but never abort a run.
"""

import logging
from typing import Generator

from ..domain.operation import StepResult, StepStatus
from ..domain.settings import BootstrapSettings
from ..exit_codes import DownloadError, PreferencesError
from ..infra.http_client import HttpClient
from ..infra.tools import OsaScriptClient

logger = logging.getLogger(__name__)


class PreferencesService:
    """Imports terminal preferences."""

    def __init__(self, settings: BootstrapSettings, osascript: OsaScriptClient, http: HttpClient):
        self.settings = settings
        self.osascript = osascript
        self.http = http

    def import_iterm_profile(self) -> Generator[str, None, StepResult]:
        """Open the iTerm2 profile JSON so iTerm2 imports it."""
        profile = self.settings.iterm_profile_path
        if profile is None:
            yield "No iTerm2 profile configured."
            return StepResult("iterm_profile", StepStatus.SKIPPED, "not_configured")

        if not profile.is_file():
            raise PreferencesError(f"iTerm2 profile not found at {profile}")

        yield "Importing iTerm2 profile..."
        result = self.osascript.open_in_iterm(profile)
        if not result.ok:
            raise PreferencesError(f"iTerm2 did not import {profile}: {result.stderr.strip()}")

        yield "iTerm2 profile imported."
        status = StepStatus.DRY_RUN if self.settings.dry_run else StepStatus.SUCCESS
        return StepResult("iterm_profile", status, "imported", metadata={'path': str(profile)})

    def download_color_scheme(self) -> Generator[str, None, StepResult]:
        """Download the colour scheme to its fixed path unless it is already there."""
        url = self.settings.color_scheme_url
        dest = self.settings.color_scheme_path

        if not url or dest is None:
            yield "No colour scheme configured."
            return StepResult("color_scheme", StepStatus.SKIPPED, "not_configured")

        if dest.exists():
            yield f"Colour scheme already present at {dest}."
            return StepResult("color_scheme", StepStatus.SKIPPED, "already_present",
                              metadata={'path': str(dest)})

        yield f"Downloading colour scheme to {dest}..."
        if self.settings.dry_run:
            return StepResult("color_scheme", StepStatus.DRY_RUN, "would_download",
                              metadata={'path': str(dest), 'url': url})

        try:
            self.http.download(url, dest)
        except DownloadError as e:
            raise PreferencesError(str(e)) from e

        return StepResult("color_scheme", StepStatus.SUCCESS, "downloaded",
                          metadata={'path': str(dest), 'url': url})
