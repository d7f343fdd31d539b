"""Derive safe local filenames for downloaded assets.

Filenames come from the last non-empty segment of the URL path, so
``https://cdn.test/photos/`` is saved as ``photos``. Characters outside
``[A-Za-z0-9._-]`` are replaced with ``_`` and leading dots are removed so a
URL can never produce a hidden file or escape the destination directory.
URLs without a usable segment fall back to a name derived from a hash of the
full URL.

Examples
--------
>>> filename_from_url("https://cdn.test/photos/Summer%20Menu.jpg?w=800")
'Summer_Menu.jpg'
>>> filename_from_url("https://cdn.test/").startswith("asset_")
True
"""

from __future__ import annotations

import hashlib
import logging
import re
import threading
import urllib.parse
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
HASH_LENGTH = 12


def short_hash(url: str) -> str:
    """Return a short, deterministic hex digest of ``url``."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def filename_from_url(url: str) -> str:
    """Return a filesystem-safe filename for ``url``."""
    try:
        path = urllib.parse.urlsplit(url).path
    except ValueError:
        logger.debug("Unparseable URL %s; using hashed filename", url)
        return f"asset_{short_hash(url)}"
    segments = [part for part in path.split("/") if part]
    segment = urllib.parse.unquote(segments[-1]) if segments else ""
    cleaned = _UNSAFE_CHARS.sub("_", segment).lstrip(".")
    if not cleaned.strip("_"):
        return f"asset_{short_hash(url)}"
    return cleaned


def suffixed_name(name: str, counter: int) -> str:
    """Return ``name`` with ``_<counter>`` inserted before the extension.

    >>> suffixed_name("image.jpg", 2)
    'image_2.jpg'
    >>> suffixed_name("README", 3)
    'README_3'
    """
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        return f"{name}_{counter}"
    return f"{stem}_{counter}.{extension}"


class FilenameRegistry:
    """Hand out destination filenames, one per URL, without collisions.

    A filename reserved during this run is never handed to a second URL. An
    unreserved filename that already exists in the directory is treated as a
    previous run's download of the same URL and reported as cached.
    Reservations are guarded by a lock so worker threads cannot claim the
    same name.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self._lock = threading.Lock()
        self._reserved: dict[str, str] = {}

    def reserve(self, url: str) -> tuple[Path, bool]:
        """Reserve a filename for ``url``.

        Returns
        -------
        tuple[Path, bool]
            The destination path and whether it already holds the file from a
            previous run (in which case no download is needed).
        """
        name = filename_from_url(url)
        with self._lock:
            if name not in self._reserved:
                self._reserved[name] = url
                return self.directory / name, (self.directory / name).is_file()
            counter = 2
            while True:
                candidate = suffixed_name(name, counter)
                if candidate not in self._reserved:
                    target = self.directory / candidate
                    if not target.exists():
                        self._reserved[candidate] = url
                        return target, False
                counter += 1

    def release(self, path: Path) -> None:
        """Forget the reservation for ``path`` after a failed download."""
        with self._lock:
            self._reserved.pop(path.name, None)


__all__ = ["FilenameRegistry", "filename_from_url", "short_hash", "suffixed_name"]
