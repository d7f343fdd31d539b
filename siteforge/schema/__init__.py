"""Schemas describing the site configuration content model.

This subpackage holds the validation engine (:mod:`.core`), the shared value
rules (:mod:`.primitives`), one schema per section variant
(:mod:`.sections`), and the top-level document schema (:mod:`.site`).
Schemas report defects as :class:`~siteforge.schema.core.Issue` lists and
never raise for malformed input.

Examples
--------
>>> from siteforge.schema import CTA_BUTTON
>>> [str(issue) for issue in CTA_BUTTON.validate({"label": "Book"}).issues]
['(root): Either "anchor" or "href" must be provided']
"""

from .core import Issue, Schema, ValidationOutcome, format_path
from .primitives import CTA_BUTTON, LOCALIZED, SOCIAL_LINK, URL, looks_like_url_or_path
from .sections import SECTION_SCHEMAS, SectionType, lookup
from .site import SITE

__all__ = [
    "CTA_BUTTON",
    "LOCALIZED",
    "SECTION_SCHEMAS",
    "SITE",
    "SOCIAL_LINK",
    "URL",
    "Issue",
    "Schema",
    "SectionType",
    "ValidationOutcome",
    "format_path",
    "looks_like_url_or_path",
    "lookup",
]
