"""Fetch remote assets into a local directory.

:class:`AssetDownloader` resolves one URL at a time. It follows redirects by
hand so the hop count is bounded, streams the body to disk, and removes the
partial file when anything goes wrong. Filenames and the on-disk cache are
handled by :class:`~siteforge.assets.naming.FilenameRegistry`.

Example
-------
>>> from pathlib import Path
>>> from siteforge.assets.naming import FilenameRegistry
>>> downloader = AssetDownloader()  # doctest: +SKIP
>>> registry = FilenameRegistry(Path("assets"))  # doctest: +SKIP
>>> downloader.resolve("https://cdn.test/hero.jpg", registry).path.name  # doctest: +SKIP
'hero.jpg'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import urllib.parse
from http import HTTPStatus
from pathlib import Path

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import TimeoutError as Urllib3TimeoutError
from urllib3.util.retry import Retry

from .._constants import DOWNLOAD_CHUNK_SIZE, DOWNLOAD_TIMEOUT, MAX_REDIRECTS, USER_AGENT
from .naming import FilenameRegistry

logger = logging.getLogger(__name__)


class DownloadError(RuntimeError):
    """Raised when a single asset cannot be fetched."""


@dc.dataclass(slots=True)
class DownloadResult:
    """Where a URL ended up on disk and whether the network was used."""

    url: str
    path: Path
    cached: bool = False


def build_session() -> requests.Session:
    """Return a session that retries transient server and connection errors."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    retry = Retry(
        total=3,
        connect=3,
        read=2,
        redirect=0,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
        raise_on_redirect=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class AssetDownloader:
    """Download assets with bounded redirects and cleanup on failure."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = DOWNLOAD_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    ) -> None:
        """Initialise the downloader.

        Parameters
        ----------
        session : requests.Session, optional
            Session used for every request. Defaults to :func:`build_session`.
        timeout : float, optional
            Per-request timeout in seconds.
        max_redirects : int, optional
            Number of redirect hops followed before giving up.
        chunk_size : int, optional
            Size of the chunks streamed to disk.
        """
        self._session = session or build_session()
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.chunk_size = chunk_size

    def resolve(self, url: str, registry: FilenameRegistry) -> DownloadResult:
        """Return a local file for ``url``, downloading it unless cached.

        Raises
        ------
        DownloadError
            If the request fails, times out, redirects too often, or the
            server answers with an error status.
        """
        target, cached = registry.reserve(url)
        try:
            return self.retrieve(url, target, cached=cached)
        except DownloadError:
            registry.release(target)
            raise

    def retrieve(self, url: str, target: Path, *, cached: bool = False) -> DownloadResult:
        """Return the result for an already reserved ``target``.

        Nothing is fetched when ``cached`` is true.
        """
        if cached:
            logger.debug("Reusing %s for %s", target, url)
            return DownloadResult(url=url, path=target, cached=True)
        self.fetch(url, target)
        return DownloadResult(url=url, path=target)

    def fetch(self, url: str, target: Path) -> None:
        """Download ``url`` into ``target``, following redirects by hand."""
        response = self._open(url)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with target.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        handle.write(chunk)
        except (requests.RequestException, OSError) as exc:
            target.unlink(missing_ok=True)
            raise _transfer_error(url, exc) from exc
        finally:
            response.close()
        logger.info("Downloaded %s -> %s", url, target)

    def _open(self, url: str) -> requests.Response:
        current = url
        for _ in range(self.max_redirects + 1):
            response = self._get(current, original=url)
            status = response.status_code
            if HTTPStatus.MULTIPLE_CHOICES <= status < HTTPStatus.BAD_REQUEST:
                location = response.headers.get("Location")
                response.close()
                if not location:
                    msg = f"HTTP {status} when downloading {url}"
                    raise DownloadError(msg)
                current = urllib.parse.urljoin(current, location)
                logger.debug("Following redirect for %s to %s", url, current)
                continue
            if not HTTPStatus.OK <= status < HTTPStatus.MULTIPLE_CHOICES:
                response.close()
                msg = f"HTTP {status} when downloading {url}"
                raise DownloadError(msg)
            return response
        msg = f"Too many redirects (>{self.max_redirects}) for URL: {url}"
        raise DownloadError(msg)

    def _get(self, url: str, *, original: str) -> requests.Response:
        try:
            return self._session.get(
                url, allow_redirects=False, stream=True, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise _transfer_error(original, exc) from exc


def _is_timeout(exc: BaseException) -> bool:
    # Streaming read timeouts arrive as a ConnectionError wrapping urllib3's error.
    timeouts = (requests.Timeout, Urllib3TimeoutError, TimeoutError)
    if isinstance(exc, timeouts):
        return True
    return any(isinstance(arg, timeouts) for arg in exc.args)


def _transfer_error(url: str, exc: BaseException) -> DownloadError:
    if _is_timeout(exc):
        msg = f"Timeout downloading {url}"
    else:
        msg = f"Failed to download {url}: {exc}"
    return DownloadError(msg)


__all__ = ["AssetDownloader", "DownloadError", "DownloadResult", "build_session"]
