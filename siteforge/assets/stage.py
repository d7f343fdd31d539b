"""Localize every remote asset referenced by a configuration file.

The stage loads the document with the round-trip loader, collects the remote
URLs, resolves each unique URL once, points every slot that referenced it at
the local copy, and saves the document back to the same file. Per-URL
failures are collected rather than raised; the original URL stays in place
for those slots so the next run can retry.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .._constants import DEFAULT_ASSETS_DIRNAME
from ..config.loader import (
    ConfigDocument,
    ConfigWriteError,
    load_config_document,
    save_config_document,
)
from .downloader import AssetDownloader, DownloadError, DownloadResult
from .naming import FilenameRegistry
from .walker import AssetReference, collect_remote_urls, group_by_url

logger = logging.getLogger(__name__)

ProgressCallback = cabc.Callable[[str, DownloadResult | None, str | None], None]


@dc.dataclass(slots=True)
class AssetReport:
    """Outcome of one asset stage run."""

    downloaded: list[str] = dc.field(default_factory=list)
    skipped: list[str] = dc.field(default_factory=list)
    errors: list[str] = dc.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """``True`` when every URL was resolved and the file was saved."""
        return not self.errors


def local_reference(path: Path, base_dir: Path) -> str:
    """Return ``path`` relative to ``base_dir`` using forward slashes.

    >>> local_reference(Path("/site/assets/a.jpg"), Path("/site"))
    'assets/a.jpg'
    """
    return Path(os.path.relpath(path, base_dir)).as_posix()


def resolve_references(
    references: cabc.Sequence[AssetReference],
    destination: Path,
    base_dir: Path,
    *,
    downloader: AssetDownloader,
    workers: int = 1,
    progress: ProgressCallback | None = None,
) -> AssetReport:
    """Resolve ``references`` into ``destination`` and rewrite their slots.

    Each unique URL is resolved once and every reference to it receives the
    same local path, relative to ``base_dir``.
    """
    report = AssetReport()
    groups = group_by_url(references)
    if not groups:
        return report

    destination.mkdir(parents=True, exist_ok=True)
    registry = FilenameRegistry(destination)
    # Names are claimed in document order so collisions resolve the same way
    # regardless of worker scheduling.
    reservations = {url: registry.reserve(url) for url in groups}

    def resolve(url: str) -> tuple[str, DownloadResult | None, str | None]:
        target, cached = reservations[url]
        try:
            return url, downloader.retrieve(url, target, cached=cached), None
        except DownloadError as exc:
            registry.release(target)
            return url, None, str(exc)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(resolve, groups))
    else:
        outcomes = [resolve(url) for url in groups]

    for url, result, error in outcomes:
        if progress is not None:
            progress(url, result, error)
        if result is None:
            report.errors.append(error or f"Failed to download {url}")
            logger.warning("Could not localize %s: %s", url, error)
            continue
        local = local_reference(result.path, base_dir)
        for reference in groups[url]:
            reference.set(local)
        if result.cached:
            report.skipped.append(url)
        else:
            report.downloaded.append(url)
    return report


def download_assets(
    config_path: Path,
    output_dir: Path | None = None,
    *,
    downloader: AssetDownloader | None = None,
    workers: int = 1,
    progress: ProgressCallback | None = None,
    document: ConfigDocument | None = None,
) -> AssetReport:
    """Localize the remote assets referenced by ``config_path``.

    Parameters
    ----------
    config_path : Path
        YAML or JSON configuration file. It is rewritten in place.
    output_dir : Path, optional
        Destination directory. Defaults to ``assets/`` next to the config.
    downloader : AssetDownloader, optional
        Downloader to use; a default one is built when omitted.
    workers : int, optional
        Number of parallel downloads. ``1`` downloads sequentially.
    progress : callable, optional
        Called once per unique URL with the result or the error message.
    document : ConfigDocument, optional
        An already loaded round-trip document for ``config_path``.

    Returns
    -------
    AssetReport
        Downloaded and cached URLs plus per-URL error messages.

    Raises
    ------
    ConfigLoadError
        If the configuration cannot be loaded.
    """
    if document is None:
        document = load_config_document(config_path, round_trip=True)
    destination = output_dir or document.directory / DEFAULT_ASSETS_DIRNAME
    if not destination.is_absolute():
        destination = Path.cwd() / destination

    references = collect_remote_urls(document.data)
    logger.info(
        "Found %d remote reference(s) in %s", len(references), document.path.name
    )
    report = resolve_references(
        references,
        destination,
        document.directory,
        downloader=downloader or AssetDownloader(),
        workers=workers,
        progress=progress,
    )
    if report.downloaded or report.skipped:
        _save(document, report)
    return report


def _save(document: ConfigDocument, report: AssetReport) -> None:
    try:
        save_config_document(document)
    except ConfigWriteError as exc:
        report.errors.append(str(exc))
        logger.error("%s", exc)


__all__ = [
    "AssetReport",
    "download_assets",
    "local_reference",
    "resolve_references",
]
