"""Tests for loading, typing and saving configuration documents."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from siteforge.config import (
    ConfigFormat,
    ConfigLoadError,
    SiteConfig,
    SiteConfigError,
    find_default_config,
    load_config_document,
    load_site_config,
    save_config_document,
)
from siteforge.schema.sections import SectionType


def test_format_is_detected_from_extension(tmp_path: Path, site_config: dict[str, typ.Any]) -> None:
    """``.yml`` is YAML and anything else is JSON."""
    json_path = tmp_path / "site.json"
    json_path.write_text(json.dumps(site_config), encoding="utf-8")
    yml_path = tmp_path / "site.yml"
    yml_path.write_text("name: Atelier\n", encoding="utf-8")

    assert load_config_document(json_path).format is ConfigFormat.JSON
    assert load_config_document(yml_path).format is ConfigFormat.YAML
    assert load_config_document(json_path).data["name"] == "Atelier Lithos"


def test_missing_file_raises(tmp_path: Path) -> None:
    """A missing path is a load error."""
    with pytest.raises(ConfigLoadError, match="Config file not found"):
        load_config_document(tmp_path / "absent.yaml")


def test_non_mapping_root_raises(tmp_path: Path) -> None:
    """Lists and scalars are not configurations."""
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="must be a mapping"):
        load_config_document(path)


def test_malformed_yaml_raises(tmp_path: Path) -> None:
    """Parser errors are wrapped with the file name."""
    path = tmp_path / "config.yaml"
    path.write_text("name: [unterminated\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="Failed to parse YAML"):
        load_config_document(path)


def test_malformed_json_raises(tmp_path: Path) -> None:
    """JSON syntax errors are wrapped too."""
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="not valid JSON"):
        load_config_document(path)


def test_find_default_config_prefers_yaml(tmp_path: Path) -> None:
    """``config.yaml`` wins over ``config.yml``."""
    assert find_default_config(tmp_path) is None, "expected no config in an empty dir"
    (tmp_path / "config.yml").write_text("name: a\n", encoding="utf-8")
    assert find_default_config(tmp_path) == tmp_path / "config.yml"
    (tmp_path / "config.yaml").write_text("name: a\n", encoding="utf-8")
    assert find_default_config(tmp_path) == tmp_path / "config.yaml"


def test_round_trip_preserves_comments(tmp_path: Path) -> None:
    """Rewriting a YAML document keeps comments and key order."""
    path = tmp_path / "config.yaml"
    path.write_text(
        dedent(
            """
            # Studio site
            name: Atelier  # shown in the header
            hero:
              image: https://cdn.example.test/hero.jpg
            """
        ).lstrip(),
        encoding="utf-8",
    )
    document = load_config_document(path, round_trip=True)
    document.data["hero"]["image"] = "assets/hero.jpg"
    save_config_document(document)

    text = path.read_text(encoding="utf-8")
    assert "# Studio site" in text, "expected the leading comment to survive"
    assert "# shown in the header" in text, "expected the inline comment to survive"
    assert "image: assets/hero.jpg" in text, f"expected rewritten URL, got:\n{text}"
    assert text.index("name:") < text.index("hero:"), "expected key order to be preserved"


def test_json_is_saved_with_two_space_indent(tmp_path: Path) -> None:
    """JSON output is indented and newline-terminated."""
    path = tmp_path / "config.json"
    path.write_text('{"name": "Café", "tags": ["a"]}', encoding="utf-8")
    document = load_config_document(path)
    document.data["tags"].append("b")
    save_config_document(document)

    text = path.read_text(encoding="utf-8")
    assert text.endswith("}\n"), "expected a trailing newline"
    assert '\n  "name": "Café",' in text, f"expected two-space indent and raw UTF-8, got:\n{text}"
    assert json.loads(text)["tags"] == ["a", "b"]


def test_load_site_config_builds_typed_tree(config_file: Path) -> None:
    """A valid file becomes a :class:`SiteConfig`."""
    site = load_site_config(config_file)
    assert isinstance(site, SiteConfig)
    assert site.name == "Atelier Lithos"
    assert site.languages == ["en", "fr"]
    assert site.theme.heading_font.weights == [400, 700]
    assert site.theme.body_font.fallback == "sans-serif"
    assert site.navigation.links[0].anchor == "about"
    assert [block.type for block in site.sections] == [SectionType.HERO, SectionType.ABOUT]
    assert site.section("about").props["content"] == ["We carve stone by hand."]
    assert site.pipeline.steps is None, "no pipeline block means every step"


def test_load_site_config_rejects_invalid_file(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
) -> None:
    """Validation errors are listed in the raised message."""
    site_config["sections"] = []
    path = write_yaml(tmp_path / "config.yaml", site_config)
    with pytest.raises(SiteConfigError, match=r"sections: At least one section is required"):
        load_site_config(path)


def test_unknown_section_lookup_raises(config_file: Path) -> None:
    """Looking up a missing section id is a KeyError."""
    site = load_site_config(config_file)
    with pytest.raises(KeyError):
        site.section("pricing")
