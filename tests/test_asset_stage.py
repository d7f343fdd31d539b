"""Tests for localizing the assets referenced by a configuration file."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import pytest
from ruamel.yaml import YAML

from siteforge.assets.downloader import AssetDownloader
from siteforge.assets.naming import short_hash
from siteforge.assets.stage import download_assets, local_reference

HERO_IMAGE = "https://cdn.example.test/media/hero.jpg"

GALLERY_IMAGE = "https://images.example.test/vase.png?w=800"


def _load(path: Path) -> typ.Any:
    return YAML(typ="safe").load(path.read_text(encoding="utf-8"))


def _shared_hero_config(site_config: dict[str, typ.Any]) -> dict[str, typ.Any]:
    """Reference the hero image from three places."""
    site_config["seo"]["ogImage"] = HERO_IMAGE
    site_config["footer"]["logo"] = HERO_IMAGE
    return site_config


def test_shared_url_is_fetched_once_and_every_slot_rewritten(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """Three references to one URL cause a single request."""
    path = write_yaml(tmp_path / "config.yaml", _shared_hero_config(site_config))
    session = fake_session({HERO_IMAGE: make_response(body=b"jpeg")})

    report = download_assets(path, downloader=AssetDownloader(session))

    assert report.ok, f"unexpected errors {report.errors}"
    assert report.downloaded == [HERO_IMAGE], "expected exactly one download"
    assert session.get.call_count == 1, "the shared URL must be fetched once"
    data = _load(path)
    slots = [
        data["sections"][0]["props"]["backgroundImage"],
        data["seo"]["ogImage"],
        data["footer"]["logo"],
    ]
    assert slots == ["assets/hero.jpg"] * 3, f"unexpected rewritten slots {slots!r}"
    assert (tmp_path / "assets" / "hero.jpg").read_bytes() == b"jpeg"


def test_second_run_makes_no_requests(
    tmp_path: Path,
    config_file: Path,
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """Once localized, a configuration has nothing left to fetch."""
    download_assets(
        config_file,
        downloader=AssetDownloader(fake_session({HERO_IMAGE: make_response(body=b"x")})),
    )
    before = config_file.read_text(encoding="utf-8")
    session = fake_session({})

    report = download_assets(config_file, downloader=AssetDownloader(session))

    session.get.assert_not_called()
    assert (report.downloaded, report.skipped, report.errors) == ([], [], []), (
        "expected an empty report on the second run"
    )
    assert config_file.read_text(encoding="utf-8") == before, "nothing should change"


def test_existing_file_is_reused(
    tmp_path: Path, config_file: Path, fake_session: typ.Callable[..., typ.Any]
) -> None:
    """A file already in the assets directory counts as skipped."""
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "hero.jpg").write_bytes(b"from an earlier run")
    session = fake_session({})

    report = download_assets(config_file, downloader=AssetDownloader(session))

    session.get.assert_not_called()
    assert report.skipped == [HERO_IMAGE], "expected a cached hit"
    assert _load(config_file)["sections"][0]["props"]["backgroundImage"] == "assets/hero.jpg"


def test_failed_url_keeps_original_value(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """Failures are collected and leave the URL in place for a retry."""
    site_config["seo"]["ogImage"] = GALLERY_IMAGE
    path = write_yaml(tmp_path / "config.yaml", site_config)
    session = fake_session(
        {HERO_IMAGE: make_response(404), GALLERY_IMAGE: make_response(body=b"png")}
    )

    report = download_assets(path, downloader=AssetDownloader(session))

    assert report.errors == [f"HTTP 404 when downloading {HERO_IMAGE}"], (
        f"unexpected errors {report.errors}"
    )
    assert report.downloaded == [GALLERY_IMAGE]
    data = _load(path)
    assert data["sections"][0]["props"]["backgroundImage"] == HERO_IMAGE, (
        "a failed URL must not be rewritten"
    )
    assert data["seo"]["ogImage"] == "assets/vase.png", "the good URL should be localized"
    assert not (tmp_path / "assets" / "hero.jpg").exists(), "no partial file expected"


def test_nothing_saved_when_every_download_fails(
    config_file: Path,
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """The file is left untouched when no URL resolved."""
    before = config_file.read_text(encoding="utf-8")
    report = download_assets(
        config_file, downloader=AssetDownloader(fake_session({HERO_IMAGE: make_response(500)}))
    )
    assert not report.ok, "expected the failure to be reported"
    assert config_file.read_text(encoding="utf-8") == before, "the config must not be rewritten"


def test_json_config_and_custom_output_dir(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """JSON files are rewritten as JSON with paths relative to the config."""
    site_dir = tmp_path / "site"
    site_dir.mkdir()
    path = site_dir / "config.json"
    path.write_text(json.dumps(site_config), encoding="utf-8")
    output = tmp_path / "public" / "media"

    report = download_assets(
        path,
        output,
        downloader=AssetDownloader(fake_session({HERO_IMAGE: make_response(body=b"jpeg")})),
    )

    assert report.ok, f"unexpected errors {report.errors}"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["sections"][0]["props"]["backgroundImage"] == "../public/media/hero.jpg"
    assert (output / "hero.jpg").is_file(), "expected the download in the custom directory"


def test_parallel_workers_and_progress(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """Worker threads resolve URLs and progress is reported per URL."""
    site_config["seo"]["ogImage"] = GALLERY_IMAGE
    path = write_yaml(tmp_path / "config.yaml", site_config)
    session = fake_session(
        {HERO_IMAGE: make_response(body=b"a"), GALLERY_IMAGE: make_response(body=b"b")}
    )
    seen: list[tuple[str, str | None]] = []

    report = download_assets(
        path,
        downloader=AssetDownloader(session),
        workers=4,
        progress=lambda url, result, error: seen.append((url, error)),
    )

    assert sorted(report.downloaded) == sorted([HERO_IMAGE, GALLERY_IMAGE])
    assert sorted(seen) == sorted([(HERO_IMAGE, None), (GALLERY_IMAGE, None)]), (
        "expected one progress call per URL"
    )


def test_local_reference_uses_forward_slashes(tmp_path: Path) -> None:
    """Paths are written relative to the config directory."""
    assert local_reference(tmp_path / "assets" / "a.jpg", tmp_path) == "assets/a.jpg"
    assert local_reference(tmp_path / "out" / "a.jpg", tmp_path / "site") == "../out/a.jpg"


@pytest.mark.parametrize("workers", [1, 4])
def test_colliding_names_are_both_kept_in_document_order(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
    workers: int,
) -> None:
    """Two URLs ending in ``image.jpg`` get separate files and slots."""
    first = "https://a.example.test/image.jpg"
    second = "https://b.example.test/image.jpg"
    site_config["seo"]["ogImage"] = first
    site_config["sections"][0]["props"]["backgroundImage"] = second
    path = write_yaml(tmp_path / "config.yaml", site_config)
    session = fake_session(
        {first: make_response(body=b"from a"), second: make_response(body=b"from b")}
    )

    report = download_assets(path, downloader=AssetDownloader(session), workers=workers)

    assert report.ok, f"unexpected errors {report.errors}"
    assets = tmp_path / "assets"
    assert (assets / "image.jpg").read_bytes() == b"from a", "first URL keeps the plain name"
    assert (assets / "image_2.jpg").read_bytes() == b"from b", "second URL gets a suffix"
    data = _load(path)
    assert data["seo"]["ogImage"] == "assets/image.jpg"
    assert data["sections"][0]["props"]["backgroundImage"] == "assets/image_2.jpg"


def test_site_url_is_localized_like_any_remote_string(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """Every ``http(s)`` value is collected, including the site ``url``."""
    site_url = "https://atelier.example.test"
    site_config["url"] = site_url
    path = write_yaml(tmp_path / "config.yaml", site_config)
    session = fake_session(
        {site_url: make_response(body=b"<html>"), HERO_IMAGE: make_response(body=b"jpeg")}
    )

    report = download_assets(path, downloader=AssetDownloader(session))

    assert report.downloaded == [HERO_IMAGE, site_url], f"unexpected downloads {report.downloaded}"
    expected = f"assets/asset_{short_hash(site_url)}"
    assert _load(path)["url"] == expected, "the site url should point at its local copy"
    assert (tmp_path / expected).read_bytes() == b"<html>"
