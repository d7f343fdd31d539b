"""Describe images with a vision model and cache the results.

:func:`annotate_directory` sends every image in a directory to an
:class:`ImageAnnotator`, parses the tagged plain-text answer with
:func:`parse_annotation`, and stores the fields in ``image-analysis.json``
inside the same directory. Each entry records the MD5 of the image in
``_hash`` so unchanged files are not sent again.

Example
-------
>>> from pathlib import Path
>>> annotator = OpenAIVisionAnnotator.from_env()  # doctest: +SKIP
>>> result = annotate_directory(Path("assets"), annotator)  # doctest: +SKIP
>>> result.analyzed, result.cached  # doctest: +SKIP
(3, 0)
"""

from __future__ import annotations

import base64
import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import hashlib
import json
import logging
import os
import time
import typing as typ
from pathlib import Path

import requests

from .._constants import ALT_TEXT_LIMIT, ANALYSIS_FILENAME

logger = logging.getLogger(__name__)

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_DELAY = 0.5

MIME_TYPES: typ.Final[dict[str, str]] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

ANALYSIS_PROMPT = """Analyze this image and provide a brief description.

Format your response as follows (plain text, not JSON):
TYPE: [photograph/logo/illustration/business_card/screenshot/diagram/other]
DESCRIPTION: [1-2 sentence description of what the image shows]
SUBJECT: [main subject category: person, product, workspace, landscape, logo, document, etc.]
QUALITY: [excellent/good/fair/poor]
MOOD: [2-4 descriptive keywords]
COLORS: [dominant color palette description]
ALT_TEXT: [accessibility description under 125 characters]"""


class AnnotationError(RuntimeError):
    """Raised when the vision service cannot be reached or configured."""


class ImageAnnotator(typ.Protocol):
    """Anything that can answer a prompt about an image."""

    def annotate(self, image: bytes, mime_type: str, prompt: str) -> str:
        """Return the model's plain-text answer for ``image``."""
        ...


class OpenAIVisionAnnotator:
    """Ask an OpenAI chat-completions model to describe images."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        api_url: str = OPENAI_API_URL,
        session: requests.Session | None = None,
        timeout: float = 60.0,
        max_tokens: int = 500,
    ) -> None:
        if not api_key:
            msg = "OPENAI_API_KEY environment variable not set"
            raise AnnotationError(msg)
        self._session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self.model = model
        self.api_url = api_url
        self.timeout = timeout
        self.max_tokens = max_tokens

    @classmethod
    def from_env(
        cls, env: cabc.Mapping[str, str] | None = None, **kwargs: typ.Any
    ) -> OpenAIVisionAnnotator:
        """Build an annotator using ``OPENAI_API_KEY`` from ``env``."""
        source = os.environ if env is None else env
        return cls(source.get("OPENAI_API_KEY", ""), **kwargs)

    def annotate(self, image: bytes, mime_type: str, prompt: str) -> str:
        """Send ``image`` with ``prompt`` and return the answer text."""
        data_url = f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"
        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
            "max_tokens": self.max_tokens,
        }
        try:
            response = self._session.post(
                self.api_url, headers=self._headers, json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach the vision API: {exc}"
            raise AnnotationError(msg) from exc
        if response.status_code >= 400:
            msg = (
                f"Vision API request failed with status {response.status_code}: "
                f"{response.text[:200]}"
            )
            raise AnnotationError(msg)
        try:
            body = response.json()
        except ValueError as exc:
            msg = "Vision API response was not valid JSON"
            raise AnnotationError(msg) from exc
        choices = body.get("choices") or [{}]
        return str((choices[0].get("message") or {}).get("content") or "")


def parse_annotation(text: str) -> dict[str, str]:
    """Turn ``KEY: value`` lines into a field mapping.

    Keys are lower-cased with whitespace collapsed to ``_``. A missing
    ``alt_text`` is derived from ``description``.

    >>> parse_annotation("TYPE: logo\\nALT TEXT: Red fox logo")
    {'type': 'logo', 'alt_text': 'Red fox logo'}
    >>> parse_annotation("DESCRIPTION: A quiet harbour")["alt_text"]
    'A quiet harbour'
    """
    fields: dict[str, str] = {}
    for line in text.splitlines():
        key, colon, value = line.partition(":")
        if not colon:
            continue
        key = "_".join(key.strip().lower().split())
        value = value.strip()
        if key and value:
            fields[key] = value
    if not fields.get("alt_text") and fields.get("description"):
        fields["alt_text"] = fields["description"][:ALT_TEXT_LIMIT]
    return fields


@dc.dataclass(slots=True)
class AnnotationResult:
    """Summary of one :func:`annotate_directory` run."""

    output_path: Path
    images: dict[str, dict[str, str]]
    analyzed: int = 0
    cached: int = 0
    failed: list[str] = dc.field(default_factory=list)


def find_images(directory: Path) -> list[Path]:
    """Return the supported images in ``directory`` sorted by name."""
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in MIME_TYPES
    )


def file_md5(path: Path) -> str:
    """Return the hex MD5 digest of ``path``'s contents."""
    return hashlib.md5(path.read_bytes(), usedforsecurity=False).hexdigest()


def _load_cache(path: Path) -> dict[str, typ.Any]:
    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable analysis cache %s: %s", path, exc)
        return {}
    images = payload.get("images") if isinstance(payload, dict) else None
    return images if isinstance(images, dict) else {}


def annotate_directory(
    directory: Path,
    annotator: ImageAnnotator,
    *,
    prompt: str = ANALYSIS_PROMPT,
    delay: float = DEFAULT_DELAY,
    on_image: cabc.Callable[[str, str], None] | None = None,
) -> AnnotationResult:
    """Annotate every image in ``directory`` and write the cache file.

    Parameters
    ----------
    directory : Path
        Directory holding the images; the analysis file is written here.
    annotator : ImageAnnotator
        Vision backend used for images that are new or changed.
    prompt : str, optional
        Prompt sent with each image.
    delay : float, optional
        Pause in seconds between requests to stay under rate limits.
    on_image : callable, optional
        Called with ``(filename, state)`` where state is ``"cached"``,
        ``"analyzed"``, or ``"failed"``.

    Raises
    ------
    AnnotationError
        If ``directory`` does not exist or is not a directory.
    """
    if not directory.is_dir():
        msg = f"Directory not found: {directory}"
        raise AnnotationError(msg)

    output_path = directory / ANALYSIS_FILENAME
    previous = _load_cache(output_path)
    result = AnnotationResult(output_path=output_path, images={})
    images = find_images(directory)
    for index, image in enumerate(images):
        digest = file_md5(image)
        existing = previous.get(image.name)
        if (
            isinstance(existing, dict)
            and existing.get("_hash") == digest
            and "error" not in existing
        ):
            result.images[image.name] = existing
            result.cached += 1
            _notify(on_image, image.name, "cached")
            continue

        try:
            answer = annotator.annotate(
                image.read_bytes(), MIME_TYPES[image.suffix.lower()], prompt
            )
        except AnnotationError as exc:
            logger.warning("Error analyzing %s: %s", image.name, exc)
            result.images[image.name] = {"error": str(exc)}
            result.failed.append(image.name)
            _notify(on_image, image.name, "failed")
        else:
            result.images[image.name] = {**parse_annotation(answer), "_hash": digest}
            _notify(on_image, image.name, "analyzed")
        result.analyzed += 1
        if delay and index < len(images) - 1:
            time.sleep(delay)

    payload = {
        "analyzed_at": dt.datetime.now(dt.UTC).isoformat(),
        "images": result.images,
    }
    output_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return result


def _notify(
    callback: cabc.Callable[[str, str], None] | None, name: str, state: str
) -> None:
    if callback is not None:
        callback(name, state)


__all__ = [
    "ANALYSIS_PROMPT",
    "AnnotationError",
    "AnnotationResult",
    "ImageAnnotator",
    "OpenAIVisionAnnotator",
    "annotate_directory",
    "file_md5",
    "find_images",
    "parse_annotation",
]
