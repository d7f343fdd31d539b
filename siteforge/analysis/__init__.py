"""Optional image annotation through a vision model."""

from .annotator import (
    AnnotationError,
    AnnotationResult,
    ImageAnnotator,
    OpenAIVisionAnnotator,
    annotate_directory,
    parse_annotation,
)

__all__ = [
    "AnnotationError",
    "AnnotationResult",
    "ImageAnnotator",
    "OpenAIVisionAnnotator",
    "annotate_directory",
    "parse_annotation",
]
