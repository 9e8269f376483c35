"""Event types emitted while converting sections."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhaseStarted:
    phase: str
    total: int


@dataclass(frozen=True)
class SectionStarted:
    section_id: str
    name: str
    index: int
    total: int


@dataclass(frozen=True)
class SectionCompleted:
    section_id: str
    style_count: int
    node_count: int
    warning_count: int


@dataclass(frozen=True)
class ConversionCompleted:
    section_count: int
    style_count: int
    node_count: int
    elapsed_ms: float


@dataclass(frozen=True)
class ConversionBlocked:
    reason: str
    blocking_issue_count: int
