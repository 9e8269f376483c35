"""Conversion orchestration: one-shot and section-by-section."""

from flowbridge.pipeline.convert import ConversionResult, convert_css
from flowbridge.pipeline.streaming import (
    PHASES,
    ConversionCancelled,
    ConversionProgress,
    Section,
    SectionResult,
    SectionsResult,
    convert_sections,
    iter_convert_sections,
    split_sections,
)

__all__ = [
    "PHASES",
    "ConversionCancelled",
    "ConversionProgress",
    "ConversionResult",
    "Section",
    "SectionResult",
    "SectionsResult",
    "convert_css",
    "convert_sections",
    "iter_convert_sections",
    "split_sections",
]
