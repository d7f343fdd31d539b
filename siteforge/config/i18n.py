"""Resolve localized text for a given language.

A localized value is either a plain string, used for every language, or a
mapping of language code to string. Resolution is driven by an explicit
:class:`LocaleContext` instead of module-level state, so the same tree can be
rendered for several languages side by side.

Examples
--------
>>> ctx = LocaleContext(current="fr", default="en", available=("en", "fr"))
>>> resolve_text({"en": "Welcome", "fr": "Bienvenue"}, ctx)
'Bienvenue'
>>> resolve_text({"en": "Welcome"}, ctx)
'Welcome'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ


@dc.dataclass(frozen=True, slots=True)
class LocaleContext:
    """The language being rendered plus the site's language configuration."""

    current: str
    default: str
    available: tuple[str, ...] = ()

    @classmethod
    def from_config(
        cls, config: cabc.Mapping[str, typ.Any], requested: str | None = None
    ) -> LocaleContext:
        """Build a context from ``languages``/``defaultLanguage``.

        ``requested`` becomes the current language when the site offers it;
        otherwise the default language is used.
        """
        default = str(config.get("defaultLanguage") or "en")
        available = tuple(str(lang) for lang in config.get("languages") or [default])
        current = requested if requested in available else default
        return cls(current=current, default=default, available=available)

    def with_language(self, language: str) -> LocaleContext:
        """Return a copy rendering ``language``."""
        return dc.replace(self, current=language)


def resolve_text(value: object, context: LocaleContext) -> str:
    """Return the string to display for ``value`` in ``context``.

    Mappings fall back from the current language to the default language,
    then to the first available language present in the mapping, then to the
    mapping's first entry. Anything that yields no string resolves to ``""``.
    """
    match value:
        case str():
            return value
        case cabc.Mapping():
            for language in (context.current, context.default, *context.available):
                text = value.get(language)
                if isinstance(text, str) and text:
                    return text
            for text in value.values():
                if isinstance(text, str) and text:
                    return text
            return ""
        case _:
            return ""


__all__ = ["LocaleContext", "resolve_text"]
