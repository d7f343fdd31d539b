"""Cyclopts CLI entrypoint for the siteforge pre-render pipeline.

The ``siteforge`` console script validates a site configuration, localizes
its remote assets, runs the whole pre-build pipeline, and optionally
annotates images with a vision model. Every option can also be supplied as a
``SITEFORGE_*`` environment variable (for example ``SITEFORGE_WORKERS=4``).
Commands exit with status 1 when the configuration is invalid or a step
fails.

Examples
--------
Validate the ``config.yaml`` in the current directory:

>>> from siteforge.cli import main
>>> main()  # doctest: +SKIP

Download assets for a specific file with four parallel workers:

>>> from siteforge.cli import app
>>> app(["download", "site/config.yaml", "--workers", "4"])  # doctest: +SKIP
"""

from __future__ import annotations

import json
import logging
import os
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .analysis import AnnotationError, OpenAIVisionAnnotator, annotate_directory
from .assets import AssetDownloader, DownloadResult, download_assets
from .config import ConfigLoadError, find_default_config, load_config_document
from .pipeline import PipelineError, StepResult, StepStatus, run_pipeline
from .schema import Issue
from .validation import validate_site_config

app = App(name="siteforge", config=cyclopts.config.Env("SITEFORGE_", command=False))  # type: ignore[unknown-argument]

_STATUS_MARKS = {
    StepStatus.PASSED: "ok",
    StepStatus.WARNING: "warning",
    StepStatus.FAILED: "FAILED",
}


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def _issue_payload(issue: Issue) -> dict[str, str]:
    return {"path": issue.path, "message": issue.message}


def _resolve_config(config: Path | None) -> Path:
    if config is not None:
        return config
    found = find_default_config(Path.cwd())
    if found is None:
        msg = "No config.yaml found in the current directory; pass a config path."
        raise ConfigLoadError(msg)
    return found


@app.command(help="Validate a site configuration and list every issue.")
def validate(
    config: typ.Annotated[
        Path | None, Parameter(help="Path to config.yaml or a JSON config")
    ] = None,
    *,
    json_output: typ.Annotated[
        bool, Parameter(name="--json", help="Print the report as JSON")
    ] = False,
) -> int:
    """Validate ``config`` and print errors and warnings.

    Parameters
    ----------
    config : Path or None, optional
        Configuration file; defaults to ``config.yaml`` in the current
        directory.
    json_output : bool, optional
        Emit ``{"valid", "errors", "warnings"}`` as JSON instead of text.

    Returns
    -------
    int
        ``0`` when the configuration is valid, ``1`` otherwise.
    """
    try:
        document = load_config_document(_resolve_config(config))
    except ConfigLoadError as exc:
        _error(str(exc))
        return 1
    report = validate_site_config(document.data)

    if json_output:
        payload = {
            "valid": report.valid,
            "errors": [_issue_payload(issue) for issue in report.errors],
            "warnings": [_issue_payload(issue) for issue in report.warnings],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0 if report.valid else 1

    for issue in report.errors:
        print(f"error: {issue}")
    for issue in report.warnings:
        print(f"warning: {issue}")
    if report.valid:
        print(f"{_format_path(document.path)}: valid ({len(report.warnings)} warning(s))")
        return 0
    print(f"{_format_path(document.path)}: invalid ({len(report.errors)} error(s))")
    return 1


@app.command(help="Download remote assets and rewrite the config to local paths.")
def download(
    config: typ.Annotated[
        Path | None, Parameter(help="Path to config.yaml or a JSON config")
    ] = None,
    *,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Destination folder (defaults to assets/ beside the config)"),
    ] = None,
    workers: typ.Annotated[
        int, Parameter(help="Number of parallel downloads")
    ] = 1,
) -> int:
    """Localize every remote asset referenced by ``config``.

    Returns
    -------
    int
        ``0`` when every URL was resolved and the config was saved.
    """

    def progress(url: str, result: DownloadResult | None, error: str | None) -> None:
        if result is None:
            print(f"failed {url}: {error}")
        elif result.cached:
            print(f"cached {url} -> {_format_path(result.path)}")
        else:
            print(f"fetched {url} -> {_format_path(result.path)}")

    try:
        report = download_assets(
            _resolve_config(config),
            output_dir,
            downloader=AssetDownloader(),
            workers=max(workers, 1),
            progress=progress,
        )
    except ConfigLoadError as exc:
        _error(str(exc))
        return 1
    print(
        f"{len(report.downloaded)} downloaded, {len(report.skipped)} cached, "
        f"{len(report.errors)} failed"
    )
    for message in report.errors:
        _error(message)
    return 0 if report.ok else 1


@app.command(help="Run the pre-build pipeline steps over a config.")
def prepare(
    config: typ.Annotated[
        Path | None, Parameter(help="Path to config.yaml or a JSON config")
    ] = None,
    *,
    steps: typ.Annotated[
        list[str] | None, Parameter(help="Only run these steps (by name)")
    ] = None,
    workers: typ.Annotated[
        int, Parameter(help="Number of parallel downloads")
    ] = 1,
) -> int:
    """Run the pipeline and print one line per step.

    Returns
    -------
    int
        ``0`` unless a required step failed.
    """

    def on_step(result: StepResult) -> None:
        print(f"[{_STATUS_MARKS[result.status]}] {result.label}")
        for message in result.messages:
            print(f"    {message}")

    try:
        report = run_pipeline(
            _resolve_config(config), steps, workers=max(workers, 1), on_step=on_step
        )
    except (ConfigLoadError, PipelineError) as exc:
        _error(str(exc))
        return 1
    print(
        f"Pipeline complete: {report.count(StepStatus.PASSED)} passed, "
        f"{report.count(StepStatus.WARNING)} warning(s), "
        f"{report.count(StepStatus.FAILED)} failed"
    )
    if not report.ok:
        _error("Pipeline failed. Fix errors above before building.")
        return 1
    return 0


@app.command(help="Describe images with a vision model and cache the results.")
def analyze(
    directory: typ.Annotated[Path, Parameter(help="Directory containing images")],
    *,
    model: typ.Annotated[
        str, Parameter(help="Vision model name")
    ] = "gpt-4o-mini",
    delay: typ.Annotated[
        float, Parameter(help="Seconds to wait between requests")
    ] = 0.5,
) -> int:
    """Annotate the images in ``directory`` into ``image-analysis.json``.

    Returns
    -------
    int
        ``0`` when the run completed, even if individual images failed.
    """
    try:
        annotator = OpenAIVisionAnnotator.from_env(model=model)
        result = annotate_directory(
            directory,
            annotator,
            delay=delay,
            on_image=lambda name, state: print(f"{state} {name}"),
        )
    except AnnotationError as exc:
        _error(str(exc))
        return 1
    print(
        f"Analyzed: {result.analyzed}, Cached: {result.cached}, "
        f"Failed: {len(result.failed)}"
    )
    print(f"wrote {_format_path(result.output_path)}")
    return 0


def main() -> None:
    """Configure logging and invoke the Cyclopts application.

    ``SITEFORGE_LOG_LEVEL`` (default ``WARNING``) sets the root log level.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    logging.basicConfig(
        level=os.environ.get("SITEFORGE_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
