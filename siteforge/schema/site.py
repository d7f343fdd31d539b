"""Top-level schema for a site configuration document.

The root schema checks global structure only. Section ``props`` are accepted
as opaque mappings here and validated afterwards by dispatching on each
section's ``type`` (see :mod:`siteforge.schema.sections`).
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from .core import (
    AnyValue,
    Boolean,
    Choice,
    ListOf,
    MappingOf,
    Number,
    Obj,
    Text,
    optional,
    required,
)
from .primitives import LOCALIZED, NON_EMPTY, PLAIN_TEXT, SOCIAL_LINK, URL

FONT = Obj(
    {
        "family": required(NON_EMPTY),
        "weights": required(
            ListOf(
                Number(minimum=100, maximum=900),
                min_items=1,
                min_message="At least one font weight is required",
            )
        ),
        "fallback": optional(NON_EMPTY),
    }
)

_COLOR_NAMES = (
    "primary-foreground",
    "secondary",
    "secondary-foreground",
    "accent",
    "accent-foreground",
    "card",
    "card-foreground",
    "popover",
    "popover-foreground",
    "muted",
    "muted-foreground",
    "border",
    "input",
    "ring",
    "destructive",
    "destructive-foreground",
)

THEME_COLORS = Obj(
    {
        "primary": required(PLAIN_TEXT),
        "background": required(PLAIN_TEXT),
        "foreground": required(PLAIN_TEXT),
        **{name: optional(PLAIN_TEXT) for name in _COLOR_NAMES},
        "custom": optional(MappingOf(PLAIN_TEXT)),
    }
)

THEME = Obj(
    {
        "colors": required(THEME_COLORS),
        "fonts": required(Obj({"heading": required(FONT), "body": required(FONT)})),
        "borderRadius": optional(PLAIN_TEXT),
        "shadows": optional(MappingOf(PLAIN_TEXT)),
        "gradients": optional(MappingOf(PLAIN_TEXT)),
        "buttonStyle": optional(
            Obj({"borderRadius": optional(Choice("none", "sm", "md", "lg", "full"))})
        ),
    }
)

SEO = Obj(
    {
        "title": required(LOCALIZED),
        "description": required(LOCALIZED),
        "keywords": optional(ListOf(NON_EMPTY)),
        "ogImage": optional(URL),
        "canonical": optional(URL),
        "locale": optional(NON_EMPTY),
        "structuredData": optional(MappingOf(AnyValue())),
        "favicon": optional(URL),
        "appleTouchIcon": optional(URL),
    }
)

NAV_LINK = Obj({"label": required(LOCALIZED), "anchor": required(NON_EMPTY)})

NAVIGATION = Obj(
    {
        "links": required(ListOf(NAV_LINK)),
        "showLanguageSwitcher": optional(Boolean()),
        "logo": optional(URL),
        "logoDark": optional(URL),
        "logoText": optional(LOCALIZED),
        "logoSubtext": optional(LOCALIZED),
        "logoSubtextColor": optional(PLAIN_TEXT),
        "headerStyle": optional(
            Obj(
                {
                    "textColorAtTop": optional(Choice("light", "dark", "auto")),
                    "alwaysShowBackground": optional(Boolean()),
                    "logoFilterAtTop": optional(PLAIN_TEXT),
                }
            )
        ),
        "ctaButton": optional(
            Obj(
                {
                    "label": required(LOCALIZED),
                    "anchor": optional(NON_EMPTY),
                    "href": optional(URL),
                    "phone": optional(NON_EMPTY),
                }
            )
        ),
    }
)

FOOTER_COLUMN = Obj(
    {
        "title": required(LOCALIZED),
        "items": required(ListOf(Obj({"text": required(LOCALIZED), "href": optional(URL)}))),
    }
)

FOOTER = Obj(
    {
        "copyright": required(LOCALIZED),
        "description": optional(LOCALIZED),
        "links": optional(ListOf(NAV_LINK)),
        "socialLinks": optional(ListOf(SOCIAL_LINK)),
        "columns": optional(ListOf(FOOTER_COLUMN)),
        "bottomText": optional(LOCALIZED),
        "logo": optional(URL),
        "layout": optional(Choice("full", "compact", "minimal")),
        "showNavigation": optional(Boolean()),
    }
)

DISCLAIMER = Obj(
    {
        "enabled": optional(Boolean()),
        "title": optional(LOCALIZED),
        "message": optional(LOCALIZED),
        "bulletPoints": optional(ListOf(LOCALIZED)),
        "buttonLabel": optional(LOCALIZED),
        "icon": optional(NON_EMPTY),
    }
)

# The tag is only required to be present here; membership in the closed set
# of section types is reported per section so one bad block does not hide the
# others.
SECTION_BLOCK = Obj(
    {
        "type": required(Text(message="Section type must not be empty")),
        "id": required(NON_EMPTY),
        "props": required(MappingOf(AnyValue())),
    }
)

PIPELINE = Obj({"steps": optional(ListOf(NON_EMPTY))})


def _default_language_listed(config: cabc.Mapping[str, typ.Any]) -> bool:
    languages = config.get("languages") or []
    if not languages:
        return True
    return config.get("defaultLanguage") in languages


SITE = Obj(
    {
        "name": required(NON_EMPTY),
        "url": optional(URL),
        "languages": optional(ListOf(NON_EMPTY)),
        "defaultLanguage": required(NON_EMPTY),
        "theme": required(THEME),
        "seo": optional(SEO),
        "navigation": required(NAVIGATION),
        "sections": required(
            ListOf(SECTION_BLOCK, min_items=1, min_message="At least one section is required")
        ),
        "footer": required(FOOTER),
        "disclaimer": optional(DISCLAIMER),
        "pipeline": optional(PIPELINE),
    }
).refine(
    _default_language_listed,
    "defaultLanguage must be included in the languages array",
    location=("defaultLanguage",),
)


__all__ = [
    "DISCLAIMER",
    "FONT",
    "FOOTER",
    "NAVIGATION",
    "NAV_LINK",
    "PIPELINE",
    "SECTION_BLOCK",
    "SEO",
    "SITE",
    "THEME",
]
