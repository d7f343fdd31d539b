"""Heuristics for spotting translations typed without their diacritics.

Authors often type German or French copy on keyboards without umlauts or
accents ("Uber uns" instead of "Über uns"). The rules here are advisory: a
match yields a warning and both false positives and misses are expected.
Extend :data:`LOCALE_RULES` to cover more languages.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

MIN_CHECKED_LENGTH = 10


@dc.dataclass(frozen=True, slots=True)
class LocaleRule:
    """Suspicious ASCII spellings for one language."""

    name: str
    suspicious: tuple[re.Pattern[str], ...]

    @property
    def message(self) -> str:
        """Warning text emitted when a pattern matches."""
        return f"{self.name} text may be missing proper characters (diacritics/umlauts)"


def _patterns(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


LOCALE_RULES: typ.Final[dict[str, LocaleRule]] = {
    "de": LocaleRule(
        name="German",
        suspicious=_patterns(
            r"\bUber\b",  # Über
            r"\bfur\b",  # für
            r"\bGruss",  # Gruß
            r"\bMunchen",  # München
            r"\bKoln",  # Köln
            r"\bDusseldorf",  # Düsseldorf
            r"\boffnung",  # Öffnung
        ),
    ),
    "fr": LocaleRule(
        name="French",
        suspicious=_patterns(
            r"\belegant",  # élégant
            r"\betablissement",  # établissement
            r"\bcafe\b",  # café
            r"\bapero",  # apéro
            r"\bhotellerie",  # hôtellerie
        ),
    ),
}


def check_text(
    text: str,
    language: str,
    rules: typ.Mapping[str, LocaleRule] = LOCALE_RULES,
) -> str | None:
    """Return a warning message when ``text`` looks wrong for ``language``."""
    rule = rules.get(language)
    if rule is None or len(text) < MIN_CHECKED_LENGTH:
        return None
    if any(pattern.search(text) for pattern in rule.suspicious):
        return rule.message
    return None


__all__ = ["LOCALE_RULES", "MIN_CHECKED_LENGTH", "LocaleRule", "check_text"]
