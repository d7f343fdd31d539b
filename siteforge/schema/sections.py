"""Per-section ``props`` schemas and the closed registry of section types.

Each content block in a site configuration carries a ``type`` tag and a
free-form ``props`` mapping. The tag selects exactly one schema from
:data:`SECTION_SCHEMAS`; unknown tags are rejected rather than skipped so the
set of section types stays a hard contract with the renderer.

Examples
--------
>>> from siteforge.schema.sections import SectionType, lookup
>>> lookup("hero") is lookup(SectionType.HERO)
True
>>> lookup("carousel") is None
True
"""

from __future__ import annotations

import collections.abc as cabc
import enum
import typing as typ

from .core import (
    Boolean,
    Choice,
    ListOf,
    Number,
    Obj,
    Schema,
    Text,
    Union,
    optional,
    required,
)
from .primitives import (
    CTA_BUTTON,
    EMAIL,
    ICON_POSITION,
    LOCALIZED,
    NON_EMPTY,
    PLAIN_TEXT,
    SOCIAL_LINK,
    URL,
)


class SectionType(enum.StrEnum):
    """Every section variant the renderer knows how to draw."""

    HERO = "hero"
    SERVICES = "services"
    GALLERY = "gallery"
    ABOUT = "about"
    CONTACT = "contact"
    HOURS = "hours"
    FEATURED = "featured"
    TESTIMONIALS = "testimonials"
    CTA_BANNER = "cta-banner"
    TEXT_BLOCK = "text-block"
    MAP = "map"


_QUOTE = Obj({"text": required(LOCALIZED), "author": optional(NON_EMPTY)})
_COORDINATES = Obj({"lat": required(Number()), "lng": required(Number())})

HERO = Obj(
    {
        "backgroundImage": optional(URL),
        "backgroundBlur": optional(Choice("none", "sm", "md", "lg")),
        "overlayColor": optional(PLAIN_TEXT),
        "overlayOpacity": optional(Number(minimum=0, maximum=100)),
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "badge": optional(LOCALIZED),
        "quote": optional(_QUOTE),
        "cta": optional(ListOf(CTA_BUTTON)),
        "overlayGradient": optional(Boolean()),
        "scrollIndicator": optional(Boolean()),
        "scrollTarget": optional(NON_EMPTY),
        "profileImage": optional(URL),
        "ratingBadge": optional(
            Obj({"score": required(NON_EMPTY), "label": required(LOCALIZED)})
        ),
        "layout": optional(Choice("centered", "split")),
        "stats": optional(
            ListOf(
                Obj(
                    {
                        "value": required(NON_EMPTY),
                        "label": required(LOCALIZED),
                        "icon": optional(NON_EMPTY),
                    }
                ),
                min_items=2,
                max_items=4,
                min_message="Stats must have at least 2 items",
                max_message="Stats cannot exceed 4 items",
            )
        ),
    }
)

_SERVICE_ITEM = Obj(
    {
        "icon": optional(NON_EMPTY),
        "title": required(LOCALIZED),
        "description": required(LOCALIZED),
        "features": optional(ListOf(LOCALIZED)),
    }
)

_SERVICE_GROUP = Obj(
    {
        "title": required(LOCALIZED),
        "image": optional(URL),
        "services": required(ListOf(_SERVICE_ITEM)),
    }
)


def _has_services_or_groups(props: cabc.Mapping[str, typ.Any]) -> bool:
    return props.get("services") is not None or props.get("groups") is not None


SERVICES = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "services": optional(ListOf(_SERVICE_ITEM)),
        "groups": optional(ListOf(_SERVICE_GROUP)),
        "tags": optional(ListOf(Obj({"label": required(LOCALIZED)}))),
        "cardSize": optional(Choice("compact", "normal", "large")),
        "columns": optional(Choice(2, 3, 4)),
        "highlight": optional(
            Obj(
                {
                    "title": required(LOCALIZED),
                    "description": optional(LOCALIZED),
                    "image": optional(URL),
                    "tags": optional(ListOf(LOCALIZED)),
                    "stats": optional(
                        ListOf(
                            Obj({"value": required(NON_EMPTY), "label": required(LOCALIZED)})
                        )
                    ),
                    "cta": optional(
                        Obj(
                            {
                                "label": required(LOCALIZED),
                                "anchor": optional(NON_EMPTY),
                                "href": optional(URL),
                                "icon": optional(NON_EMPTY),
                                "iconPosition": optional(ICON_POSITION),
                            }
                        )
                    ),
                }
            )
        ),
    }
).refine(_has_services_or_groups, 'Either "services" or "groups" must be provided')

GALLERY = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "items": required(
            ListOf(
                Obj(
                    {
                        "src": required(URL),
                        "alt": optional(LOCALIZED),
                        "title": optional(LOCALIZED),
                        "location": optional(LOCALIZED),
                        "category": optional(LOCALIZED),
                    }
                ),
                min_items=1,
                min_message="Gallery must have at least one item",
            )
        ),
        "columns": optional(Number()),
        "aspectRatio": optional(Choice("4:3", "1:1", "3:4", "16:9")),
        "maxInitialItems": optional(Number()),
        "loadMoreLabel": optional(LOCALIZED),
        "layout": optional(Choice("grid", "strip")),
        "thumbnailSize": optional(Choice("sm", "md", "lg")),
    }
)

ABOUT = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "content": required(
            ListOf(
                LOCALIZED,
                min_items=1,
                min_message="About section must have at least one content paragraph",
            )
        ),
        "image": optional(URL),
        "imagePosition": optional(ICON_POSITION),
        "floatingCard": optional(
            Obj(
                {
                    "icon": optional(NON_EMPTY),
                    "label": required(LOCALIZED),
                    "text": required(LOCALIZED),
                }
            )
        ),
        "stats": optional(
            ListOf(
                Obj(
                    {
                        "icon": optional(NON_EMPTY),
                        "label": required(LOCALIZED),
                        "value": required(NON_EMPTY),
                    }
                )
            )
        ),
        "quote": optional(_QUOTE),
        "highlights": optional(ListOf(Obj({"text": required(LOCALIZED)}))),
        "values": optional(
            ListOf(
                Obj(
                    {
                        "icon": optional(NON_EMPTY),
                        "title": required(LOCALIZED),
                        "description": required(LOCALIZED),
                    }
                )
            )
        ),
    }
)

CONTACT = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "phone": optional(
            Union(
                (str, NON_EMPTY),
                (
                    list,
                    ListOf(Obj({"label": optional(LOCALIZED), "number": required(NON_EMPTY)})),
                ),
                expected="string or array",
            )
        ),
        "email": optional(EMAIL),
        "address": optional(
            Obj(
                {
                    "street": required(NON_EMPTY),
                    "city": required(NON_EMPTY),
                    "postalCode": required(NON_EMPTY),
                    "country": optional(NON_EMPTY),
                    "mapsUrl": optional(URL),
                }
            )
        ),
        "coordinates": optional(_COORDINATES),
        "hours": optional(
            Obj(
                {
                    "label": required(LOCALIZED),
                    "schedule": required(
                        ListOf(Obj({"days": required(LOCALIZED), "hours": required(LOCALIZED)}))
                    ),
                }
            )
        ),
        "ctaCard": optional(
            Obj(
                {
                    "title": required(LOCALIZED),
                    "subtitle": optional(LOCALIZED),
                    "buttons": optional(ListOf(CTA_BUTTON)),
                }
            )
        ),
        "socialLinks": optional(ListOf(SOCIAL_LINK)),
        "mapEmbed": optional(URL),
        "languages": optional(ListOf(NON_EMPTY)),
        "paymentMethods": optional(ListOf(NON_EMPTY)),
        "note": optional(LOCALIZED),
        "instagramEmbed": optional(
            Obj({"username": required(NON_EMPTY), "displayText": optional(LOCALIZED)})
        ),
    }
)

# Schedule entries use a singular "day" with morning/afternoon/continuous
# ranges, unlike the contact card's "days"/"hours" pairs.
HOURS = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "schedule": required(
            ListOf(
                Obj(
                    {
                        "day": required(LOCALIZED),
                        "morning": optional(NON_EMPTY),
                        "afternoon": optional(NON_EMPTY),
                        "continuous": optional(NON_EMPTY),
                        "closed": optional(Boolean()),
                    }
                ),
                min_items=1,
                min_message="Schedule must have at least one day entry",
            )
        ),
        "ctaButton": optional(
            Obj(
                {
                    "label": required(LOCALIZED),
                    "phone": optional(NON_EMPTY),
                    "href": optional(URL),
                    "icon": optional(NON_EMPTY),
                    "iconPosition": optional(ICON_POSITION),
                }
            )
        ),
        "paymentMethods": optional(ListOf(NON_EMPTY)),
        "showTodayBadge": optional(Boolean()),
        "showOpenClosedBadge": optional(Boolean()),
        "timezone": optional(NON_EMPTY),
        "note": optional(LOCALIZED),
        "uiStrings": optional(
            Obj(
                {
                    "today": optional(LOCALIZED),
                    "closed": optional(LOCALIZED),
                    "paymentMethods": optional(LOCALIZED),
                    "open": optional(LOCALIZED),
                }
            )
        ),
    }
)

FEATURED = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "description": optional(LOCALIZED),
        "item": required(
            Obj(
                {
                    "image": required(URL),
                    "badge": optional(LOCALIZED),
                    "region": optional(LOCALIZED),
                    "name": required(LOCALIZED),
                    "producer": optional(LOCALIZED),
                    "details": optional(
                        ListOf(Obj({"label": required(LOCALIZED), "text": required(LOCALIZED)}))
                    ),
                    "volume": optional(NON_EMPTY),
                }
            )
        ),
        "categories": optional(
            ListOf(Obj({"name": required(LOCALIZED), "count": required(LOCALIZED)}))
        ),
    }
)

TESTIMONIALS = Obj(
    {
        "label": optional(LOCALIZED),
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "testimonials": required(
            ListOf(
                Obj(
                    {
                        "quote": required(LOCALIZED),
                        "author": required(LOCALIZED),
                        "role": optional(LOCALIZED),
                        "rating": optional(Number(minimum=1, maximum=5)),
                        "image": optional(URL),
                    }
                ),
                min_items=1,
                min_message="Testimonials section must have at least one testimonial",
            )
        ),
    }
)

CTA_BANNER = Obj(
    {
        "title": required(LOCALIZED),
        "subtitle": optional(LOCALIZED),
        "backgroundImage": optional(URL),
        "backgroundColor": optional(Text(min_length=0)),
        "cta": required(CTA_BUTTON),
    }
)

TEXT_BLOCK = Obj(
    {
        "title": optional(LOCALIZED),
        "content": required(LOCALIZED),
    }
)

MAP = Obj(
    {
        "embedUrl": optional(URL),
        "address": optional(LOCALIZED),
        "mapsUrl": optional(URL),
        "staticImage": optional(URL),
        "title": optional(LOCALIZED),
        "coordinates": optional(_COORDINATES),
        "zoom": optional(Number()),
    }
)

SECTION_SCHEMAS: typ.Final[dict[SectionType, Schema]] = {
    SectionType.HERO: HERO,
    SectionType.SERVICES: SERVICES,
    SectionType.GALLERY: GALLERY,
    SectionType.ABOUT: ABOUT,
    SectionType.CONTACT: CONTACT,
    SectionType.HOURS: HOURS,
    SectionType.FEATURED: FEATURED,
    SectionType.TESTIMONIALS: TESTIMONIALS,
    SectionType.CTA_BANNER: CTA_BANNER,
    SectionType.TEXT_BLOCK: TEXT_BLOCK,
    SectionType.MAP: MAP,
}


def lookup(section_type: str) -> Schema | None:
    """Return the props schema for ``section_type`` or ``None`` if unknown."""
    try:
        return SECTION_SCHEMAS[SectionType(section_type)]
    except ValueError:
        return None


__all__ = ["SECTION_SCHEMAS", "SectionType", "lookup"]
