"""Load, type, and localize site configuration documents.

This subpackage reads ``config.yaml`` (or a JSON equivalent) with
:func:`load_config_document`, writes rewritten documents back with
:func:`save_config_document`, and converts validated mappings into the typed
dataclasses the renderer consumes (:class:`SiteConfig` and friends).
Localized strings are resolved through an explicit :class:`LocaleContext`.

Examples
--------
>>> from pathlib import Path
>>> from siteforge.config import load_site_config
>>> site = load_site_config(Path("config.yaml"))  # doctest: +SKIP
>>> site.section("hero").type  # doctest: +SKIP
<SectionType.HERO: 'hero'>
"""

from .i18n import LocaleContext, resolve_text
from .loader import (
    ConfigDocument,
    ConfigFormat,
    ConfigLoadError,
    ConfigWriteError,
    detect_format,
    find_default_config,
    load_config_document,
    load_site_config,
    save_config_document,
)
from .models import (
    FontConfig,
    FooterConfig,
    NavigationConfig,
    NavLinkConfig,
    PipelineConfig,
    SectionBlock,
    SiteConfig,
    SiteConfigError,
    ThemeConfig,
)

__all__ = [
    "ConfigDocument",
    "ConfigFormat",
    "ConfigLoadError",
    "ConfigWriteError",
    "FontConfig",
    "FooterConfig",
    "LocaleContext",
    "NavLinkConfig",
    "NavigationConfig",
    "PipelineConfig",
    "SectionBlock",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "detect_format",
    "find_default_config",
    "load_config_document",
    "load_site_config",
    "resolve_text",
    "save_config_document",
]
