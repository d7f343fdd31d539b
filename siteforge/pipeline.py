"""Run the pre-build pipeline over one configuration file.

The pipeline is an ordered list of named steps:

``validate-config``
    Validate the document. Required: a failure stops the run.
``download-assets``
    Localize remote assets and rewrite the configuration file.
``optimize-images``
    Report image sizes in the assets directory and flag large files.
``generate-metadata``
    Audit alt text and SEO fields for completeness.

Optional steps that fail are reported as warnings and the run continues. The
document is loaded once with the round-trip loader and shared by every step,
so later steps see the local paths written by ``download-assets``.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import logging
import typing as typ
from pathlib import Path

from ._constants import DEFAULT_ASSETS_DIRNAME, IMAGE_EXTENSIONS, LARGE_ASSET_BYTES
from .assets.downloader import AssetDownloader
from .assets.stage import download_assets
from .config.i18n import LocaleContext, resolve_text
from .config.loader import ConfigDocument, load_config_document
from .validation import validate_site_config

logger = logging.getLogger(__name__)


class PipelineError(ValueError):
    """Raised when the pipeline is asked to run steps it does not know."""


class StepFailed(RuntimeError):
    """Raised by a step runner to report that the step did not succeed."""


class StepStatus(enum.StrEnum):
    """Final state of a pipeline step."""

    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


@dc.dataclass(slots=True)
class PipelineContext:
    """State shared by the steps of one run."""

    document: ConfigDocument
    assets_dir: Path
    downloader: AssetDownloader | None = None
    workers: int = 1


StepRunner = cabc.Callable[[PipelineContext], list[str]]


@dc.dataclass(frozen=True, slots=True)
class PipelineStep:
    """A named unit of pipeline work."""

    name: str
    label: str
    required: bool
    run: StepRunner


@dc.dataclass(slots=True)
class StepResult:
    """What happened when a step ran."""

    name: str
    label: str
    status: StepStatus
    messages: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class PipelineReport:
    """Results of every executed step, in execution order."""

    results: list[StepResult] = dc.field(default_factory=list)

    def count(self, status: StepStatus) -> int:
        """Return how many steps finished with ``status``."""
        return sum(1 for result in self.results if result.status is status)

    @property
    def ok(self) -> bool:
        """``True`` when no required step failed."""
        return self.count(StepStatus.FAILED) == 0


@dc.dataclass(slots=True)
class AssetSize:
    """Size of one image in the assets directory."""

    name: str
    size: int

    @property
    def large(self) -> bool:
        """``True`` when the file exceeds the recommended size."""
        return self.size > LARGE_ASSET_BYTES


def format_bytes(size: int) -> str:
    """Return ``size`` in B, KB, or MB with one decimal place.

    >>> format_bytes(512)
    '512 B'
    >>> format_bytes(2048)
    '2.0 KB'
    >>> format_bytes(6 * 1024 * 1024)
    '6.0 MB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def summarize_assets(assets_dir: Path) -> list[AssetSize]:
    """Return the images in ``assets_dir`` sorted by name."""
    if not assets_dir.is_dir():
        return []
    return [
        AssetSize(name=path.name, size=path.stat().st_size)
        for path in sorted(assets_dir.iterdir())
        if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS
    ]


def audit_metadata(config: cabc.Mapping[str, typ.Any]) -> list[str]:
    """Return warnings about missing alt text and SEO fields."""
    context = LocaleContext.from_config(config)
    warnings = [f"Missing alt text: {item}" for item in _missing_alt_text(config, context)]
    seo = config.get("seo") or {}
    for key, label in (("title", "SEO title"), ("description", "SEO description")):
        if not seo.get(key):
            warnings.append(f"Missing: {label}")
    for key, label in (
        ("keywords", "SEO keywords"),
        ("ogImage", "Open Graph image"),
        ("structuredData", "Structured data (JSON-LD)"),
    ):
        if not seo.get(key):
            warnings.append(f"Missing recommended: {label}")
    return warnings


def _missing_alt_text(
    config: cabc.Mapping[str, typ.Any], context: LocaleContext
) -> list[str]:
    missing: list[str] = []
    for section in config.get("sections") or []:
        props = section.get("props") or {}
        match section.get("type"):
            case "gallery":
                for index, item in enumerate(props.get("items") or [], start=1):
                    if not item.get("alt"):
                        title = resolve_text(item.get("title"), context) or "untitled"
                        missing.append(f"Gallery item {index} ({title})")
            case "hero" if props.get("backgroundImage") and not props.get(
                "backgroundImageAlt"
            ):
                missing.append("Hero background image")
            case _:
                continue
    return missing


def _run_validate(context: PipelineContext) -> list[str]:
    report = validate_site_config(context.document.data)
    if not report.valid:
        details = "; ".join(str(issue) for issue in report.errors)
        msg = f"{len(report.errors)} validation error(s): {details}"
        raise StepFailed(msg)
    return [str(issue) for issue in report.warnings]


def _run_download(context: PipelineContext) -> list[str]:
    report = download_assets(
        context.document.path,
        context.assets_dir,
        downloader=context.downloader,
        workers=context.workers,
        document=context.document,
    )
    if report.errors:
        raise StepFailed("; ".join(report.errors))
    return [
        f"{len(report.downloaded)} downloaded, {len(report.skipped)} already present"
    ]


def _run_optimize(context: PipelineContext) -> list[str]:
    sizes = summarize_assets(context.assets_dir)
    if not sizes:
        return [f"No image files found in {context.assets_dir}"]
    messages = [
        f"{asset.name} is {format_bytes(asset.size)}; consider compressing"
        for asset in sizes
        if asset.large
    ]
    total = sum(asset.size for asset in sizes)
    messages.append(f"{len(sizes)} image(s), {format_bytes(total)} total")
    return messages


def _run_metadata(context: PipelineContext) -> list[str]:
    return audit_metadata(context.document.data)


PIPELINE_STEPS: typ.Final[tuple[PipelineStep, ...]] = (
    PipelineStep("validate-config", "Validate configuration", True, _run_validate),
    PipelineStep("download-assets", "Download remote assets", False, _run_download),
    PipelineStep("optimize-images", "Optimize images", False, _run_optimize),
    PipelineStep("generate-metadata", "Generate metadata", False, _run_metadata),
)


def select_steps(names: cabc.Sequence[str] | None) -> list[PipelineStep]:
    """Return the steps to run for ``names``, in pipeline order.

    Required steps always run. ``None`` selects every step.

    Raises
    ------
    PipelineError
        If ``names`` contains an unknown step.
    """
    if names is None:
        return list(PIPELINE_STEPS)
    known = {step.name for step in PIPELINE_STEPS}
    unknown = [name for name in names if name not in known]
    if unknown:
        msg = (
            f"Unknown pipeline step(s): {', '.join(unknown)}. "
            f"Known steps: {', '.join(step.name for step in PIPELINE_STEPS)}"
        )
        raise PipelineError(msg)
    wanted = set(names)
    return [step for step in PIPELINE_STEPS if step.required or step.name in wanted]


def run_pipeline(
    config_path: Path,
    steps: cabc.Sequence[str] | None = None,
    *,
    assets_dir: Path | None = None,
    downloader: AssetDownloader | None = None,
    workers: int = 1,
    on_step: cabc.Callable[[StepResult], None] | None = None,
) -> PipelineReport:
    """Run the pipeline over ``config_path``.

    Parameters
    ----------
    config_path : Path
        Configuration file to process.
    steps : Sequence[str], optional
        Step names to run. Defaults to the configuration's ``pipeline.steps``
        or, when absent, every step.
    assets_dir : Path, optional
        Asset directory. Defaults to ``assets/`` next to the configuration.
    downloader : AssetDownloader, optional
        Downloader used by ``download-assets``.
    workers : int, optional
        Parallel downloads for ``download-assets``.
    on_step : callable, optional
        Invoked with each :class:`StepResult` as soon as the step finishes.

    Returns
    -------
    PipelineReport
        One result per executed step.

    Raises
    ------
    ConfigLoadError
        If the configuration cannot be loaded.
    PipelineError
        If an unknown step is requested.
    """
    document = load_config_document(config_path, round_trip=True)
    if steps is None:
        pipeline = document.data.get("pipeline")
        if isinstance(pipeline, cabc.Mapping) and isinstance(pipeline.get("steps"), list):
            steps = [str(name) for name in pipeline["steps"]]
    selected = select_steps(steps)
    context = PipelineContext(
        document=document,
        assets_dir=assets_dir or document.directory / DEFAULT_ASSETS_DIRNAME,
        downloader=downloader,
        workers=workers,
    )

    report = PipelineReport()
    for step in selected:
        result = _execute(step, context)
        report.results.append(result)
        if on_step is not None:
            on_step(result)
        if result.status is StepStatus.FAILED:
            logger.error("Required step %s failed; stopping", step.name)
            break
    return report


def _execute(step: PipelineStep, context: PipelineContext) -> StepResult:
    logger.info("Running pipeline step %s", step.name)
    try:
        messages = step.run(context)
    except StepFailed as exc:
        status = StepStatus.FAILED if step.required else StepStatus.WARNING
        return StepResult(step.name, step.label, status, [str(exc)])
    return StepResult(step.name, step.label, StepStatus.PASSED, messages)


__all__ = [
    "PIPELINE_STEPS",
    "AssetSize",
    "PipelineContext",
    "PipelineError",
    "PipelineReport",
    "PipelineStep",
    "StepFailed",
    "StepResult",
    "StepStatus",
    "audit_metadata",
    "format_bytes",
    "run_pipeline",
    "select_steps",
    "summarize_assets",
]
