"""Value-level rules shared by every section and the top-level schema.

Authors mix relative asset paths and remote URLs in the same fields, so the
URL rule is deliberately permissive: anything that looks like a path is
accepted and only the remainder must parse as an absolute URL.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ
from urllib.parse import urlsplit

from .core import (
    Choice,
    Issue,
    Location,
    MappingOf,
    Obj,
    Schema,
    Text,
    describe,
    optional,
    required,
)

_PATH_PREFIXES = ("/", "./", "../", "assets/", "public/", "data:")
_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def looks_like_url_or_path(value: str) -> bool:
    """Return ``True`` for relative asset paths, data URIs, and absolute URLs."""
    if value.startswith(_PATH_PREFIXES):
        return True
    if "/" in value and " " not in value and not value.startswith("http"):
        return True
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_PATTERN.match(parts.scheme):
        return False
    return bool(parts.netloc or parts.path)


class UrlText(Schema):
    """A non-empty string that is a URL or a relative path."""

    message = "Must be a valid URL or relative path"

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not isinstance(value, str):
            issues.append(Issue(location, f"Expected string, received {describe(value)}"))
            return
        text = value.strip()
        if not text:
            issues.append(Issue(location, "URL must not be empty"))
            return
        if not looks_like_url_or_path(text):
            issues.append(Issue(location, self.message))


class LocalizedText(Schema):
    """A plain string or a mapping of language code to translated string."""

    def __init__(self) -> None:
        self._entries = MappingOf(
            Text(message="Localized text must not be empty"),
            key_message="Language key must not be empty",
        )

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        match value:
            case str():
                if not value.strip():
                    issues.append(Issue(location, "Text must not be empty"))
            case cabc.Mapping():
                if not value:
                    issues.append(Issue(location, "Must have at least one language"))
                    return
                self._entries.check(value, location, issues)
            case _:
                issues.append(
                    Issue(location, f"Expected string or object, received {describe(value)}")
                )


def has_destination(button: cabc.Mapping[str, typ.Any]) -> bool:
    """Return ``True`` when a button declares an ``anchor`` or an ``href``."""
    return bool(button.get("anchor") or button.get("href"))


NON_EMPTY = Text()
PLAIN_TEXT = Text(min_length=0, trim=False)
URL = UrlText()
LOCALIZED = LocalizedText()
ICON_POSITION = Choice("left", "right")

CTA_BUTTON = Obj(
    {
        "label": required(LOCALIZED),
        "anchor": optional(Text(message="Anchor must not be empty")),
        "href": optional(URL),
        "variant": optional(Choice("primary", "outline", "gold", "secondary")),
        "icon": optional(Text(message="Icon must not be empty")),
        "iconPosition": optional(ICON_POSITION),
    }
).refine(has_destination, 'Either "anchor" or "href" must be provided')

SOCIAL_LINK = Obj(
    {
        "platform": required(NON_EMPTY),
        "url": required(URL),
        "label": optional(Text(message="Label must not be empty")),
    }
)

EMAIL = Text(
    message="Email must not be empty",
    pattern=EMAIL_PATTERN,
    pattern_message="Must be a valid email address",
)


__all__ = [
    "CTA_BUTTON",
    "EMAIL",
    "EMAIL_PATTERN",
    "ICON_POSITION",
    "LOCALIZED",
    "NON_EMPTY",
    "PLAIN_TEXT",
    "SOCIAL_LINK",
    "URL",
    "LocalizedText",
    "UrlText",
    "has_destination",
    "looks_like_url_or_path",
]
