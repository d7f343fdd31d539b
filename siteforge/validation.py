"""Validate a raw site configuration and report every defect at once.

:func:`validate_site_config` runs in four passes:

1. The top-level schema. A malformed root returns immediately with errors
   only, because section checks are meaningless without a section list.
2. Each section's ``props`` against the schema selected by its ``type``, with
   issue paths prefixed by ``sections[<index>].props``.
3. Non-fatal warnings: a missing ``seo`` block and duplicate section ids.
4. Locale heuristics flagging text that seems to lack diacritics.

The input tree is never modified, so validation is safe to repeat before and
after asset resolution.

Examples
--------
>>> from siteforge.validation import validate_site_config
>>> report = validate_site_config({"name": "Atelier"})
>>> report.valid
False
>>> report.errors[0].path
'defaultLanguage'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

from .locale_rules import LOCALE_RULES, LocaleRule, check_text
from .schema.core import Issue, Location
from .schema.sections import lookup
from .schema.site import SITE

logger = logging.getLogger(__name__)

_LINTED_BLOCKS = ("navigation", "footer", "seo", "disclaimer")


@dc.dataclass(slots=True)
class ValidationReport:
    """Aggregated outcome of validating one configuration document."""

    errors: list[Issue] = dc.field(default_factory=list)
    warnings: list[Issue] = dc.field(default_factory=list)

    @property
    def valid(self) -> bool:
        """``True`` when no errors were found; warnings never count."""
        return not self.errors


def validate_section_props(
    section_type: object, props: object, index: int
) -> list[Issue]:
    """Validate one section's ``props`` against the schema for its type."""
    schema = lookup(section_type) if isinstance(section_type, str) else None
    if schema is None:
        return [Issue(("sections", index, "type"), f'Unknown section type: "{section_type}"')]
    outcome = schema.validate(props)
    return [issue.prefixed(("sections", index, "props")) for issue in outcome.issues]


def validate_site_config(
    config: object,
    *,
    locale_rules: typ.Mapping[str, LocaleRule] = LOCALE_RULES,
) -> ValidationReport:
    """Validate a parsed configuration tree.

    Parameters
    ----------
    config : object
        The deserialized configuration document (usually a mapping).
    locale_rules : Mapping[str, LocaleRule], optional
        Language rule table used by the diacritics heuristic.

    Returns
    -------
    ValidationReport
        Errors and warnings with their field paths. ``valid`` is true iff
        ``errors`` is empty.
    """
    report = ValidationReport()
    root = SITE.validate(config)
    if not root.ok:
        report.errors.extend(root.issues)
        logger.debug("Root schema rejected configuration with %d issue(s)", len(root.issues))
        return report

    document = typ.cast(cabc.Mapping[str, typ.Any], config)
    sections: list[cabc.Mapping[str, typ.Any]] = list(document["sections"])
    for index, section in enumerate(sections):
        report.errors.extend(validate_section_props(section["type"], section["props"], index))

    if document.get("seo") is None:
        report.warnings.append(
            Issue(("seo",), 'No "seo" field found; SEO metadata will not be generated')
        )
    report.warnings.extend(_duplicate_section_ids(sections))
    report.warnings.extend(_locale_warnings(document, locale_rules))
    logger.debug(
        "Validated %d section(s): %d error(s), %d warning(s)",
        len(sections),
        len(report.errors),
        len(report.warnings),
    )
    return report


def _duplicate_section_ids(sections: list[cabc.Mapping[str, typ.Any]]) -> list[Issue]:
    seen: set[str] = set()
    warnings: list[Issue] = []
    for index, section in enumerate(sections):
        section_id = section["id"]
        if section_id in seen:
            warnings.append(
                Issue(("sections", index, "id"), f'Duplicate section id "{section_id}"')
            )
        seen.add(section_id)
    return warnings


class _LocaleLinter:
    """Walk localized text and collect suspicious-spelling warnings."""

    def __init__(
        self,
        languages: cabc.Sequence[str],
        default_language: str,
        rules: typ.Mapping[str, LocaleRule],
    ) -> None:
        self.languages = set(languages)
        self.default_language = default_language
        self.rules = rules
        self.checked: set[tuple[str, str]] = set()
        self.warnings: list[Issue] = []

    def visit(self, value: object, location: Location) -> None:
        match value:
            case str():
                self._check(value, self.default_language, location)
            case cabc.Mapping() if self.languages.intersection(value):
                for language, text in value.items():
                    if isinstance(text, str):
                        self._check(text, language, (*location, language))
            case cabc.Mapping():
                for key, item in value.items():
                    self.visit(item, (*location, key))
            case list():
                for index, item in enumerate(value):
                    self.visit(item, (*location, index))
            case _:
                return

    def _check(self, text: str, language: str, location: Location) -> None:
        key = (language, text)
        if key in self.checked:
            return
        self.checked.add(key)
        message = check_text(text, language, self.rules)
        if message:
            self.warnings.append(Issue(location, message))


def _locale_warnings(
    document: cabc.Mapping[str, typ.Any],
    rules: typ.Mapping[str, LocaleRule],
) -> list[Issue]:
    default_language = str(document["defaultLanguage"])
    languages = list(document.get("languages") or [default_language])
    if not any(language in rules for language in [*languages, default_language]):
        return []
    linter = _LocaleLinter(languages, default_language, rules)
    for index, section in enumerate(document["sections"]):
        linter.visit(section["props"], ("sections", index, "props"))
    for block in _LINTED_BLOCKS:
        if document.get(block) is not None:
            linter.visit(document[block], (block,))
    return linter.warnings


__all__ = ["ValidationReport", "validate_section_props", "validate_site_config"]
