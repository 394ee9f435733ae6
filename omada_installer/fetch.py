"""HTTP access for the listing page, the liveness probe and the package download."""

from pathlib import Path
from typing import Type

import requests

from .config import InstallerConfig
from .errors import FetchError, InstallerError, UnreachableError, UntrustedDomainError
from .logger import get_logger
from .normalize import filename_of, is_trusted_url
from .retry import RetryError, exponential_backoff, should_retry_http_status

logger = get_logger()

TRANSIENT_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
)

CHUNK_SIZE = 1024 * 256


class TransientStatusError(requests.exceptions.HTTPError):
    """A response status worth retrying (408, 429, 5xx gateway errors)."""


def _headers(config: InstallerConfig) -> dict:
    return {"User-Agent": config.user_agent}


def _send(method: str, url: str, config: InstallerConfig, **kwargs) -> requests.Response:
    logger.record_http_request()
    resp = requests.request(method, url, headers=_headers(config), **kwargs)
    if should_retry_http_status(resp.status_code):
        resp.close()
        raise TransientStatusError(f"{resp.status_code} from {url}", response=resp)
    return resp


def _with_retry(method: str, url: str, config: InstallerConfig, **kwargs) -> requests.Response:
    """Send a request under the configured retry budget."""

    def on_retry(attempt, exc, delay):
        logger.warning(f"{method} failed, retrying", url=url, attempt=attempt, delay=delay, error=str(exc))

    send = exponential_backoff(
        max_retries=config.max_retries,
        base_delay=config.retry_delay,
        exceptions=TRANSIENT_EXCEPTIONS + (TransientStatusError,),
        on_retry=on_retry,
    )(_send)
    return send(method, url, config, **kwargs)


def request_with_error_handling(
    method: str,
    url: str,
    config: InstallerConfig,
    error_cls: Type[InstallerError] = FetchError,
    **kwargs,
) -> requests.Response:
    """Send a request with standardized error handling and logging.

    Args:
        method: HTTP method (GET or HEAD)
        url: The URL to request
        config: Installer configuration (timeouts, retries, User-Agent)
        error_cls: Error raised on any failure

    Returns:
        Response object with a 2xx status

    Raises:
        error_cls: On retry exhaustion, a non-2xx status or a request failure
    """
    kwargs.setdefault("timeout", config.timeout)
    try:
        resp = _with_retry(method, url, config, **kwargs)
    except RetryError as e:
        logger.error(f"{method} failed after {e.attempts} attempts", url=url, error=str(e.last_error))
        raise error_cls(f"{method} {url} failed after {e.attempts} attempts: {e.last_error}") from e
    except requests.exceptions.RequestException as e:
        logger.error(f"{method} request error", url=url, error=str(e))
        raise error_cls(f"{method} {url} request error: {e}") from e

    if not 200 <= resp.status_code < 300:
        resp.close()
        logger.error(f"{method} returned a non-success status", url=url, status=resp.status_code)
        raise error_cls(f"{method} {url} returned {resp.status_code}")
    return resp


def _require_trusted_location(resp: requests.Response, url: str, config: InstallerConfig) -> None:
    """Raise UntrustedDomainError if redirects left the trusted domains."""
    if is_trusted_url(resp.url, config.trusted_domains):
        return
    resp.close()
    logger.error("Redirected to an untrusted location", url=url, location=resp.url)
    raise UntrustedDomainError(f"{url} redirected to an untrusted location: {resp.url}")


def fetch_page(url: str, config: InstallerConfig) -> str:
    """GET a page and return its text. Raises FetchError."""
    logger.debug("Fetching page", url=url)
    resp = request_with_error_handling("GET", url, config, error_cls=FetchError)
    logger.debug("Fetched page", url=url, bytes=len(resp.content))
    return resp.text


def probe_url(url: str, config: InstallerConfig) -> int:
    """HEAD the URL and return its status.

    Raises UnreachableError unless 2xx, and UntrustedDomainError when a
    redirect ends outside the trusted domains.
    """
    resp = request_with_error_handling(
        "HEAD", url, config, error_cls=UnreachableError, allow_redirects=True
    )
    _require_trusted_location(resp, url, config)
    logger.debug("Probe ok", url=url, status=resp.status_code)
    return resp.status_code


def download_file(url: str, dest_dir: Path, config: InstallerConfig, trusted_only: bool = False) -> Path:
    """Stream ``url`` into ``dest_dir`` and return the file path.

    With ``trusted_only`` the final URL after redirects must be on a trusted
    domain. A partially written file is removed before FetchError propagates.
    """
    name = filename_of(url)
    if not name:
        raise FetchError(f"Cannot derive a file name from {url}")
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / name

    logger.info("Downloading package", url=url, dest=str(dest))
    resp = request_with_error_handling(
        "GET", url, config, error_cls=FetchError,
        stream=True, timeout=config.download_timeouts,
    )
    if trusted_only:
        _require_trusted_location(resp, url, config)
    try:
        with resp, dest.open("wb") as f:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
    except (requests.exceptions.RequestException, OSError) as e:
        dest.unlink(missing_ok=True)
        logger.error("Download interrupted", url=url, error=str(e))
        raise FetchError(f"Download of {url} interrupted: {e}") from e

    logger.info("Saved package", path=str(dest), bytes=dest.stat().st_size)
    return dest
