"""Typed dataclasses describing a validated site configuration.

These are built from a mapping that has already passed
:func:`siteforge.validation.validate_site_config`; the builders therefore
read keys directly and only apply defaults for optional members. Section
``props`` stay as mappings because their shape depends on the section type.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from ..schema.sections import SectionType

LocalizedValue = str | dict[str, str]


class SiteConfigError(ValueError):
    """Raised when a mapping cannot be turned into a typed configuration."""


@dc.dataclass(slots=True)
class FontConfig:
    """A font family with its weights and CSS fallback stack."""

    family: str
    weights: list[int]
    fallback: str | None = None


@dc.dataclass(slots=True)
class ThemeConfig:
    """Colors and fonts consumed by the stylesheet injector."""

    colors: dict[str, typ.Any]
    heading_font: FontConfig
    body_font: FontConfig
    border_radius: str | None = None
    extras: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class NavLinkConfig:
    """Header or footer navigation entry pointing at a section anchor."""

    label: LocalizedValue
    anchor: str


@dc.dataclass(slots=True)
class NavigationConfig:
    """Header navigation: links, optional call to action, and styling."""

    links: list[NavLinkConfig]
    logo: str | None = None
    cta_button: dict[str, typ.Any] | None = None
    header_style: dict[str, typ.Any] | None = None
    show_language_switcher: bool = False


@dc.dataclass(slots=True)
class FooterConfig:
    """Footer copy, link groups, and social profiles."""

    copyright: LocalizedValue
    links: list[NavLinkConfig] = dc.field(default_factory=list)
    social_links: list[dict[str, typ.Any]] = dc.field(default_factory=list)
    extras: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class SectionBlock:
    """One content block of the page."""

    type: SectionType
    id: str
    props: cabc.Mapping[str, typ.Any]


@dc.dataclass(slots=True)
class PipelineConfig:
    """Optional restriction of the pre-build pipeline steps."""

    steps: list[str] | None = None


@dc.dataclass(slots=True)
class SiteConfig:
    """Root of a validated configuration, handed to the renderer."""

    name: str
    default_language: str
    languages: list[str]
    theme: ThemeConfig
    navigation: NavigationConfig
    sections: list[SectionBlock]
    footer: FooterConfig
    url: str | None = None
    seo: dict[str, typ.Any] | None = None
    disclaimer: dict[str, typ.Any] | None = None
    pipeline: PipelineConfig = dc.field(default_factory=PipelineConfig)

    @classmethod
    def from_mapping(cls, data: cabc.Mapping[str, typ.Any]) -> SiteConfig:
        """Build a typed configuration from a validated mapping.

        Raises
        ------
        SiteConfigError
            If a required member is missing or a section type is unknown,
            which indicates the mapping skipped validation.
        """
        try:
            default_language = str(data["defaultLanguage"])
            languages = [str(lang) for lang in data.get("languages") or []]
            if default_language not in languages:
                languages.insert(0, default_language)
            pipeline_raw = data.get("pipeline") or {}
            return cls(
                name=str(data["name"]),
                default_language=default_language,
                languages=languages,
                theme=_build_theme(data["theme"]),
                navigation=_build_navigation(data["navigation"]),
                sections=[_build_section(entry) for entry in data["sections"]],
                footer=_build_footer(data["footer"]),
                url=data.get("url"),
                seo=_optional_dict(data.get("seo")),
                disclaimer=_optional_dict(data.get("disclaimer")),
                pipeline=PipelineConfig(steps=_optional_list(pipeline_raw.get("steps"))),
            )
        except KeyError as exc:
            msg = f"Missing {exc} in site configuration"
            raise SiteConfigError(msg) from exc

    def section(self, section_id: str) -> SectionBlock:
        """Return the first section with ``section_id``."""
        for block in self.sections:
            if block.id == section_id:
                return block
        msg = f"Unknown section '{section_id}'."
        raise KeyError(msg)


def _optional_dict(value: object) -> dict[str, typ.Any] | None:
    if isinstance(value, cabc.Mapping):
        return dict(value)
    return None


def _optional_list(value: object) -> list[str] | None:
    if isinstance(value, list):
        return [str(item) for item in value]
    return None


def _build_font(payload: cabc.Mapping[str, typ.Any]) -> FontConfig:
    return FontConfig(
        family=str(payload["family"]),
        weights=[int(weight) for weight in payload["weights"]],
        fallback=payload.get("fallback"),
    )


def _build_theme(payload: cabc.Mapping[str, typ.Any]) -> ThemeConfig:
    fonts = payload["fonts"]
    extras = {
        key: value
        for key, value in payload.items()
        if key not in {"colors", "fonts", "borderRadius"}
    }
    return ThemeConfig(
        colors=dict(payload["colors"]),
        heading_font=_build_font(fonts["heading"]),
        body_font=_build_font(fonts["body"]),
        border_radius=payload.get("borderRadius"),
        extras=extras,
    )


def _build_nav_links(entries: object) -> list[NavLinkConfig]:
    match entries:
        case list() as items:
            return [
                NavLinkConfig(label=item["label"], anchor=str(item["anchor"]))
                for item in items
            ]
        case _:
            return []


def _build_navigation(payload: cabc.Mapping[str, typ.Any]) -> NavigationConfig:
    return NavigationConfig(
        links=_build_nav_links(payload["links"]),
        logo=payload.get("logo"),
        cta_button=_optional_dict(payload.get("ctaButton")),
        header_style=_optional_dict(payload.get("headerStyle")),
        show_language_switcher=bool(payload.get("showLanguageSwitcher", False)),
    )


def _build_footer(payload: cabc.Mapping[str, typ.Any]) -> FooterConfig:
    extras = {
        key: value
        for key, value in payload.items()
        if key not in {"copyright", "links", "socialLinks"}
    }
    return FooterConfig(
        copyright=payload["copyright"],
        links=_build_nav_links(payload.get("links")),
        social_links=[dict(link) for link in payload.get("socialLinks") or []],
        extras=extras,
    )


def _build_section(payload: cabc.Mapping[str, typ.Any]) -> SectionBlock:
    try:
        section_type = SectionType(payload["type"])
    except ValueError as exc:
        msg = f"Unknown section type: {payload['type']!r}"
        raise SiteConfigError(msg) from exc
    return SectionBlock(type=section_type, id=str(payload["id"]), props=payload["props"])


__all__ = [
    "FontConfig",
    "FooterConfig",
    "LocalizedValue",
    "NavLinkConfig",
    "NavigationConfig",
    "PipelineConfig",
    "SectionBlock",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
]
