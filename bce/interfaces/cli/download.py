# bce/interfaces/cli/download.py
"""Download a grammar file before importing it.

Fetches the file with httpx (following redirects) and retries transient
failures using tenacity.
"""

import logging
import os
from urllib.parse import urlparse

import httpx
import tenacity

from bce.core.errors import DownloadError, InvalidUrlError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


def _is_transient(exc: BaseException) -> bool:
    """Timeouts, connection errors and 5xx responses are worth retrying."""
    if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


def validate_url(url: str) -> str:
    """Ensure the URL is an absolute http(s) URL.

    Raises:
        InvalidUrlError: For any other scheme or a missing host.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrlError(f"Invalid URL: {url}")
    return url


@tenacity.retry(
    stop=tenacity.stop_after_attempt(MAX_ATTEMPTS),
    wait=tenacity.wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=tenacity.retry_if_exception(_is_transient),
    reraise=True,
)
def _fetch(client: httpx.Client, url: str) -> bytes:
    response = client.get(url)
    response.raise_for_status()
    return response.content


def download_file(
    url: str,
    filename: str,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Download `url` into `filename`, replacing any existing file.

    Retries up to MAX_ATTEMPTS times with exponential backoff on timeouts,
    connection errors and server errors.

    Args:
        url: http(s) URL of the grammar file.
        filename: Destination path.
        timeout: Timeout in seconds for each attempt.
        transport: Optional httpx transport (used by tests).

    Returns:
        The destination path.

    Raises:
        InvalidUrlError: If the URL is not http(s).
        DownloadError: If the download fails after all retries.
    """
    validate_url(url)
    if os.path.exists(filename):
        os.remove(filename)

    try:
        with httpx.Client(
            timeout=timeout, follow_redirects=True, transport=transport
        ) as client:
            content = _fetch(client, url)
    except httpx.HTTPError as e:
        raise DownloadError(f"Unable to download {url}: {e}") from e

    try:
        with open(filename, "wb") as f:
            f.write(content)
    except OSError as e:
        raise DownloadError(f"Unable to write {filename}: {e}") from e

    logger.info("Downloaded %s to %s (%d bytes)", url, filename, len(content))
    return filename
