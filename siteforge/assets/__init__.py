"""Discover, download, and localize remote assets in a configuration tree.

The walker (:mod:`.walker`) finds remote URLs, the downloader
(:mod:`.downloader`) fetches each one with safe filenames from
:mod:`.naming`, and :func:`download_assets` ties them together and rewrites
the configuration file so repeat runs do no network work.
"""

from .downloader import AssetDownloader, DownloadError, DownloadResult, build_session
from .naming import FilenameRegistry, filename_from_url
from .stage import AssetReport, download_assets, resolve_references
from .walker import AssetReference, collect_remote_urls

__all__ = [
    "AssetDownloader",
    "AssetReference",
    "AssetReport",
    "DownloadError",
    "DownloadResult",
    "FilenameRegistry",
    "build_session",
    "collect_remote_urls",
    "download_assets",
    "filename_from_url",
    "resolve_references",
]
