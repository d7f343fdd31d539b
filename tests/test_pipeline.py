"""Tests for the pre-build pipeline runner."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from siteforge.assets.downloader import AssetDownloader
from siteforge.pipeline import (
    PipelineError,
    StepResult,
    StepStatus,
    audit_metadata,
    format_bytes,
    run_pipeline,
    select_steps,
    summarize_assets,
)

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

HERO_IMAGE = "https://cdn.example.test/media/hero.jpg"
RECOMMENDED = [
    "Missing recommended: SEO keywords",
    "Missing recommended: Open Graph image",
    "Missing recommended: Structured data (JSON-LD)",
]


def _statuses(report: typ.Any) -> list[tuple[str, StepStatus]]:
    return [(result.name, result.status) for result in report.results]


def test_select_steps_defaults_to_every_step() -> None:
    """``None`` selects the whole pipeline in order."""
    names = [step.name for step in select_steps(None)]
    assert names == [
        "validate-config",
        "download-assets",
        "optimize-images",
        "generate-metadata",
    ], f"unexpected order {names}"


def test_select_steps_always_keeps_required_steps() -> None:
    """Validation runs even when not requested, and order is fixed."""
    names = [step.name for step in select_steps(["generate-metadata", "optimize-images"])]
    assert names == ["validate-config", "optimize-images", "generate-metadata"]


def test_unknown_step_is_rejected() -> None:
    """Typos in step names are errors, not silent skips."""
    with pytest.raises(PipelineError, match=r"Unknown pipeline step\(s\): compress"):
        select_steps(["compress"])


def test_full_run_localizes_and_audits(
    tmp_path: Path,
    config_file: Path,
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """Every step runs and later steps see the downloaded files."""
    session = fake_session({HERO_IMAGE: make_response(body=b"0123456789")})
    seen: list[StepResult] = []

    report = run_pipeline(config_file, downloader=AssetDownloader(session), on_step=seen.append)

    assert report.ok, f"unexpected failures {report.results}"
    assert [result.name for result in seen] == [result.name for result in report.results], (
        "on_step should see each result as it finishes"
    )
    assert all(status is StepStatus.PASSED for _, status in _statuses(report))
    messages = {result.name: result.messages for result in report.results}
    assert messages["download-assets"] == ["1 downloaded, 0 already present"]
    assert messages["optimize-images"] == ["1 image(s), 10 B total"]
    assert messages["generate-metadata"] == RECOMMENDED
    assert "assets/hero.jpg" in config_file.read_text(encoding="utf-8"), (
        "the config should point at the local copy"
    )


def test_required_failure_stops_the_run(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    mocker: MockerFixture,
) -> None:
    """An invalid config ends the pipeline after validation."""
    site_config["sections"] = []
    path = write_yaml(tmp_path / "config.yaml", site_config)
    downloader = mocker.Mock(spec=AssetDownloader)

    report = run_pipeline(path, downloader=downloader)

    assert not report.ok, "a failed required step must fail the run"
    assert _statuses(report) == [("validate-config", StepStatus.FAILED)]
    assert report.results[0].messages == [
        "1 validation error(s): sections: At least one section is required"
    ]
    downloader.retrieve.assert_not_called()


def test_optional_failure_is_a_warning(
    tmp_path: Path,
    config_file: Path,
    fake_session: typ.Callable[..., typ.Any],
    make_response: typ.Callable[..., typ.Any],
) -> None:
    """A failed download is reported and the remaining steps still run."""
    session = fake_session({HERO_IMAGE: make_response(404)})

    report = run_pipeline(config_file, downloader=AssetDownloader(session))

    assert report.ok, "optional failures do not fail the run"
    assert _statuses(report) == [
        ("validate-config", StepStatus.PASSED),
        ("download-assets", StepStatus.WARNING),
        ("optimize-images", StepStatus.PASSED),
        ("generate-metadata", StepStatus.PASSED),
    ]
    assert report.results[1].messages == [f"HTTP 404 when downloading {HERO_IMAGE}"]
    assert report.results[2].messages == [f"No image files found in {tmp_path / 'assets'}"]
    assert report.count(StepStatus.WARNING) == 1


def test_config_pipeline_block_limits_optional_steps(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
    mocker: MockerFixture,
) -> None:
    """``pipeline.steps`` in the config picks the optional steps."""
    site_config["pipeline"] = {"steps": ["generate-metadata"]}
    path = write_yaml(tmp_path / "config.yaml", site_config)
    downloader = mocker.Mock(spec=AssetDownloader)

    report = run_pipeline(path, downloader=downloader)

    assert [name for name, _ in _statuses(report)] == ["validate-config", "generate-metadata"]
    downloader.retrieve.assert_not_called()


def test_explicit_steps_override_the_config(
    tmp_path: Path,
    site_config: dict[str, typ.Any],
    write_yaml: typ.Callable[[Path, typ.Any], Path],
) -> None:
    """Steps passed by the caller win over ``pipeline.steps``."""
    site_config["pipeline"] = {"steps": ["generate-metadata"]}
    path = write_yaml(tmp_path / "config.yaml", site_config)

    report = run_pipeline(path, ["optimize-images"])

    assert [name for name, _ in _statuses(report)] == ["validate-config", "optimize-images"]


def test_large_images_are_flagged(
    tmp_path: Path, config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Images over the size threshold get a compression hint."""
    monkeypatch.setattr("siteforge.pipeline.LARGE_ASSET_BYTES", 10)
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "big.png").write_bytes(b"x" * 20)
    (assets / "small.webp").write_bytes(b"x" * 5)
    (assets / "notes.txt").write_text("not an image", encoding="utf-8")

    report = run_pipeline(config_file, ["optimize-images"])

    assert report.results[1].messages == [
        "big.png is 20 B; consider compressing",
        "2 image(s), 25 B total",
    ], f"unexpected messages {report.results[1].messages}"


def test_summarize_assets_ignores_missing_directory(tmp_path: Path) -> None:
    """A missing assets directory has no images."""
    assert summarize_assets(tmp_path / "absent") == []


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (1023, "1023 B"), (1536, "1.5 KB"), (5 * 1024 * 1024 + 1, "5.0 MB")],
)
def test_format_bytes(size: int, expected: str) -> None:
    """Sizes use the largest unit below 1024."""
    assert format_bytes(size) == expected


def test_audit_metadata_reports_missing_fields(site_config: dict[str, typ.Any]) -> None:
    """Missing alt text and SEO fields are listed."""
    del site_config["seo"]
    del site_config["sections"][0]["props"]["backgroundImageAlt"]
    site_config["sections"].append(
        {
            "type": "gallery",
            "id": "work",
            "props": {
                "title": "Work",
                "items": [
                    {"src": "assets/vase.jpg", "title": {"en": "Vase", "fr": "Vase"}},
                    {"src": "assets/bowl.jpg"},
                    {"src": "assets/lamp.jpg", "alt": "Lamp"},
                ],
            },
        }
    )

    warnings = audit_metadata(site_config)

    assert warnings == [
        "Missing alt text: Hero background image",
        "Missing alt text: Gallery item 1 (Vase)",
        "Missing alt text: Gallery item 2 (untitled)",
        "Missing: SEO title",
        "Missing: SEO description",
        *RECOMMENDED,
    ], f"unexpected warnings {warnings}"
