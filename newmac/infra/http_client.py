"""
HTTP download client for newmac.

Fetches the Homebrew installer script, colour schemes and disk images.
"""

import logging
from pathlib import Path

import requests

from ..exit_codes import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 64


class HttpClient:
    """
    Thin wrapper over a requests session.

    Example:
        client = HttpClient()
        script = client.fetch_text("https://example.com/install.sh")
        client.download("https://example.com/App.dmg", Path("/tmp/App.dmg"))
    """

    def __init__(self, timeout: int = 30):
        """
        Initialize HttpClient.

        Args:
            timeout: HTTP connect/read timeout in seconds
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'newmac',
        })

    def fetch_text(self, url: str) -> str:
        """Fetch a URL and return its body as text."""
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadError(url, f"Failed to download {url}: {e}") from e
        return response.text

    def download(self, url: str, dest: Path) -> Path:
        """
        Stream a URL to a file, creating parent directories.

        A partially written file is removed on failure.
        """
        dest = Path(dest)
        logger.debug(f"GET {url} -> {dest}")

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(dest, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except (requests.RequestException, OSError) as e:
            if dest.is_file():
                dest.unlink()
            raise DownloadError(url, f"Failed to download {url}: {e}") from e

        return dest
