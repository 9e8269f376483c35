"""Section-by-section conversion with progress reporting and cancellation.

``iter_convert_sections`` is a generator: callers drive it and may do
other work between items. A section is always converted to completion;
the cancel check runs only before each section and between phases.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.css.resolver import build_class_index
from flowbridge.emit.emitter import emit_styles
from flowbridge.emit.ids import IdRegistry
from flowbridge.events.bus import EventBus
from flowbridge.events.types import (
    ConversionBlocked,
    ConversionCompleted,
    PhaseStarted,
    SectionCompleted,
    SectionStarted,
)
from flowbridge.model.class_index import ClassIndex
from flowbridge.model.diagnostic import ParseWarning
from flowbridge.pipeline.convert import assemble_payload
from flowbridge.safety.gate import GateResult, SafetyGate

__all__ = [
    "PHASES",
    "ConversionCancelled",
    "ConversionProgress",
    "Section",
    "SectionResult",
    "SectionsResult",
    "convert_sections",
    "iter_convert_sections",
    "split_sections",
]

PHASES = ("parsing", "css-routing", "generating", "validating", "complete")

_SECTION_MARKER = re.compile(r"/\*\s*@section\s+(.*?)\s*\*/")


class ConversionCancelled(Exception):
    """Raised when the cancel check fires at a section or phase boundary."""

    def __init__(self, phase: str) -> None:
        self.phase = phase
        super().__init__(f"Conversion cancelled during '{phase}'")


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Section:
    """One document section: its CSS and any pre-built element nodes."""

    id: str
    name: str
    css: str
    nodes: tuple[Mapping[str, Any], ...] = ()


@dataclass(frozen=True)
class ConversionProgress:
    phase: str
    current: int
    total: int
    percentage: int
    current_item: str | None = None
    elapsed_ms: int = 0
    estimated_remaining_ms: int | None = None


@dataclass(frozen=True)
class SectionResult:
    section: Section
    index: ClassIndex
    styles: tuple[dict[str, Any], ...]
    nodes: tuple[dict[str, Any], ...]

    @property
    def warnings(self) -> tuple[ParseWarning, ...]:
        return self.index.warnings


@dataclass(frozen=True)
class SectionsResult:
    """Merged outcome. ``payload`` is ``None`` when the gate blocked it."""

    payload: dict[str, Any] | None
    raw_payload: dict[str, Any]
    sections: tuple[SectionResult, ...]
    gate: GateResult
    elapsed_ms: int = 0

    @property
    def can_proceed(self) -> bool:
        return self.gate.can_proceed


@dataclass
class _Run:
    """Mutable bookkeeping for one ``iter_convert_sections`` call."""

    started: float = field(default_factory=time.perf_counter)

    def elapsed_ms(self) -> int:
        return round((time.perf_counter() - self.started) * 1000)

    def progress(self, phase: str, current: int, total: int, item: str | None = None) -> ConversionProgress:
        elapsed = self.elapsed_ms()
        remaining = None
        if current > 0 and phase != "complete":
            remaining = round(elapsed / current * (total - current))
        return ConversionProgress(
            phase=phase,
            current=current,
            total=total,
            percentage=round(current / total * 100) if total > 0 else 0,
            current_item=item,
            elapsed_ms=elapsed,
            estimated_remaining_ms=remaining,
        )


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


def split_sections(css: str) -> list[Section]:
    """Split CSS on ``/* @section <name> */`` markers.

    Text before the first marker becomes a section named ``main`` when it
    is not blank. Without markers the whole text is one section.
    """
    sections: list[Section] = []
    matches = list(_SECTION_MARKER.finditer(css))
    head = css[: matches[0].start()] if matches else css
    if head.strip() or not matches:
        sections.append(Section(id="section-1", name="main", css=head))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(css)
        n = len(sections) + 1
        sections.append(Section(id=f"section-{n}", name=match.group(1) or f"section {n}", css=css[match.end():end]))
    return sections


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def iter_convert_sections(
    sections: Iterable[Section],
    config: ConverterConfig | None = None,
    should_cancel: Callable[[], bool] | None = None,
    event_bus: EventBus | None = None,
    *,
    gate: SafetyGate | None = None,
    registry: IdRegistry | None = None,
) -> Iterator[ConversionProgress | SectionResult | SectionsResult]:
    """Convert *sections* in document order.

    Yields ``ConversionProgress`` and ``SectionResult`` items, and a
    final ``SectionsResult`` once the merged payload has been gated.
    Pass the *registry* that built the sections' nodes so their class
    references name the emitted style ids.
    Raises ``ConversionCancelled`` when *should_cancel* returns true at
    a boundary.
    """
    config = resolve_config(config)
    gate = gate or SafetyGate(config=config)
    if registry is None:
        registry = IdRegistry(config.id_prefix)
    sections = list(sections)
    total = len(sections)
    run = _Run()

    def checkpoint(phase: str) -> None:
        if should_cancel is not None and should_cancel():
            raise ConversionCancelled(phase)

    def emit(event: Any) -> None:
        if event_bus is not None:
            event_bus.emit(event)

    # Parsing
    checkpoint("parsing")
    emit(PhaseStarted("parsing", total))
    yield run.progress("parsing", 0, 1, "Reading sections")
    yield run.progress("parsing", 1, 1, f"Found {total} section(s)")

    # Routing: one class index per section
    checkpoint("css-routing")
    emit(PhaseStarted("css-routing", total))
    indexes: list[ClassIndex] = []
    for i, section in enumerate(sections):
        checkpoint("css-routing")
        emit(SectionStarted(section.id, section.name, i, total))
        yield run.progress("css-routing", i, total, section.name)
        indexes.append(build_class_index(section.css, config))
    yield run.progress("css-routing", total, total, "CSS routed")

    # Generating: styles and nodes per section, merged in order
    checkpoint("generating")
    emit(PhaseStarted("generating", total))
    results: list[SectionResult] = []
    styles: dict[str, dict[str, Any]] = {}
    nodes: list[dict[str, Any]] = []
    non_standard: list[str] = []
    for i, (section, index) in enumerate(zip(sections, indexes)):
        checkpoint("generating")
        yield run.progress("generating", i, total, section.name)
        section_styles = tuple(s.to_dict() for s in emit_styles(index, registry, config))
        section_nodes = tuple(dict(n) for n in section.nodes)
        for style in section_styles:
            styles.setdefault(style["_id"], style)
        nodes.extend(section_nodes)
        if index.non_standard_media_css:
            non_standard.append(index.non_standard_media_css)
        result = SectionResult(section, index, section_styles, section_nodes)
        results.append(result)
        emit(SectionCompleted(section.id, len(section_styles), len(section_nodes), len(index.warnings)))
        yield result
    yield run.progress("generating", total, total, "All sections generated")

    # Validating: the merged payload goes through the gate
    checkpoint("validating")
    emit(PhaseStarted("validating", 1))
    yield run.progress("validating", 0, 1, "Validating output")
    raw = assemble_payload(styles.values(), nodes, "\n\n".join(non_standard), registry, config)
    verdict = gate.check(raw)
    if not verdict.can_proceed:
        emit(ConversionBlocked(verdict.summary, len(verdict.final.blocking_issues)))
    yield run.progress("validating", 1, 1, "Validation complete")

    elapsed = run.elapsed_ms()
    emit(ConversionCompleted(total, len(styles), len(nodes), elapsed))
    yield run.progress("complete", 1, 1)
    yield SectionsResult(
        payload=verdict.payload if verdict.can_proceed else None,
        raw_payload=raw,
        sections=tuple(results),
        gate=verdict,
        elapsed_ms=elapsed,
    )


def convert_sections(
    sections: Iterable[Section],
    config: ConverterConfig | None = None,
    should_cancel: Callable[[], bool] | None = None,
    event_bus: EventBus | None = None,
    on_progress: Callable[[ConversionProgress], None] | None = None,
    *,
    gate: SafetyGate | None = None,
    registry: IdRegistry | None = None,
) -> SectionsResult:
    """Drain ``iter_convert_sections`` and return its final result."""
    final: SectionsResult | None = None
    items = iter_convert_sections(
        sections, config, should_cancel, event_bus, gate=gate, registry=registry
    )
    for item in items:
        if isinstance(item, ConversionProgress) and on_progress is not None:
            on_progress(item)
        elif isinstance(item, SectionsResult):
            final = item
    if final is None:
        raise RuntimeError("section conversion ended without a result")
    return final
