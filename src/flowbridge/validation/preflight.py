"""Preflight validator: runs every check and aggregates a verdict."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.model.diagnostic import Severity, ValidationIssue
from flowbridge.validation.graph import PayloadShapeError, PayloadView
from flowbridge.validation.rules import (
    ALL_CHECKS,
    CircularReport,
    DepthReport,
    EmbedReport,
    NodeStructureReport,
    ReferenceReport,
    StyleReport,
    UuidReport,
    check_embed_size,
)

__all__ = ["ExtraCheck", "PreflightResult", "run_preflight", "summarize"]

logger = logging.getLogger(__name__)

ExtraCheck = Callable[[PayloadView], list[ValidationIssue]]

_SUMMARY_EXAMPLES = 5

# (heading, predicate) in display order.
_SUMMARY_CATEGORIES: tuple[tuple[str, Callable[[ValidationIssue], bool]], ...] = (
    ("CRITICAL FAILURES", lambda i: i.severity is Severity.FATAL),
    ("ERRORS", lambda i: i.severity is Severity.ERROR),
    ("STYLE WARNINGS", lambda i: i.code == "INVALID_STYLE"),
    ("MISSING STYLE REFERENCES", lambda i: i.code == "MISSING_STYLE_REF"),
    ("EMBED SIZE", lambda i: i.code == "EMBED_SIZE_LARGE"),
    ("NODE WARNINGS", lambda i: i.code == "NODE_STRUCTURE_WARNING"),
    ("UNREACHABLE NODES", lambda i: i.code == "UNREACHABLE_NODE"),
)
_CATEGORIZED_WARNINGS = frozenset({
    "INVALID_STYLE", "MISSING_STYLE_REF", "EMBED_SIZE_LARGE",
    "NODE_STRUCTURE_WARNING", "UNREACHABLE_NODE",
})


@dataclass(frozen=True)
class PreflightResult:
    """Aggregated validation result for one payload.

    Computed fresh on every ``run_preflight`` call. ``is_valid`` means no
    issues at all; ``can_proceed`` means no FATAL or ERROR issues.
    """

    issues: tuple[ValidationIssue, ...]
    uuid: UuidReport = field(default_factory=UuidReport)
    references: ReferenceReport = field(default_factory=ReferenceReport)
    circular: CircularReport = field(default_factory=CircularReport)
    styles: StyleReport = field(default_factory=StyleReport)
    embed_size: EmbedReport = field(default_factory=EmbedReport)
    depth: DepthReport = field(default_factory=DepthReport)
    node_structure: NodeStructureReport = field(default_factory=NodeStructureReport)
    summary: str = ""

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def can_proceed(self) -> bool:
        return not any(issue.is_blocking for issue in self.issues)

    @property
    def blocking_issues(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_blocking]

    def of_code(self, code: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.code == code]

    def counts(self) -> dict[str, int]:
        counts = {severity.value: 0 for severity in Severity}
        for issue in self.issues:
            counts[issue.severity.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "canProceed": self.can_proceed,
            "uuid": self.uuid.to_dict(),
            "references": self.references.to_dict(),
            "circular": self.circular.to_dict(),
            "styles": self.styles.to_dict(),
            "embedSize": self.embed_size.to_dict(),
            "depth": self.depth.to_dict(),
            "nodeStructure": self.node_structure.to_dict(),
            "summary": self.summary,
            "issues": [issue.to_dict() for issue in self.issues],
        }


def summarize(issues: tuple[ValidationIssue, ...] | list[ValidationIssue]) -> str:
    """Render a bounded, human-readable summary grouped by category."""
    if not issues:
        return "All validations passed"
    lines: list[str] = []
    categories = list(_SUMMARY_CATEGORIES)
    categories.append((
        "OTHER WARNINGS",
        lambda i: i.severity is Severity.WARNING and i.code not in _CATEGORIZED_WARNINGS,
    ))
    for heading, matches in categories:
        selected = [issue for issue in issues if matches(issue)]
        if not selected:
            continue
        lines.append(f"{heading} ({len(selected)}):")
        lines.extend(f"   - {issue.message}" for issue in selected[:_SUMMARY_EXAMPLES])
        if len(selected) > _SUMMARY_EXAMPLES:
            lines.append(f"   ... and {len(selected) - _SUMMARY_EXAMPLES} more")
    if not lines:
        lines.append(f"{len(issues)} informational note(s)")
    return "\n".join(lines)


def invalid_payload_result(reason: str) -> PreflightResult:
    issue = ValidationIssue(Severity.FATAL, "INVALID_PAYLOAD", f"Invalid payload: {reason}")
    return PreflightResult(issues=(issue,), summary=summarize([issue]))


def run_preflight(
    payload: Any,
    *,
    config: ConverterConfig | None = None,
    extra_css: str = "",
    extra_js: str = "",
    extra_checks: list[ExtraCheck] | None = None,
) -> PreflightResult:
    """Validate *payload* and return a ``PreflightResult``.

    Never raises on bad input: a payload that is not an object or lacks the
    node/style arrays becomes a single FATAL ``INVALID_PAYLOAD`` issue, as
    does any check that fails on malformed field values.

    Args:
        payload: Clipboard envelope or its inner ``payload`` object.
        config: Thresholds (embed sizes, maximum depth).
        extra_css: Extra CSS counted toward the global embed size.
        extra_js: Extra JS counted toward the global embed size.
        extra_checks: Additional checks whose issues are appended.
    """
    config = resolve_config(config)
    try:
        view = PayloadView.from_payload(payload)
    except PayloadShapeError as e:
        logger.warning("Rejecting payload: %s", e)
        return invalid_payload_result(str(e))

    reports: dict[str, Any] = {}
    issues: list[ValidationIssue] = []
    try:
        for name, check in ALL_CHECKS:
            if name == "embed_size":
                check = partial(check_embed_size, extra_css=extra_css, extra_js=extra_js)
            reports[name] = check(view, config)
        for report in reports.values():
            issues.extend(report.issues)
        for extra in extra_checks or ():
            issues.extend(extra(view))
    except Exception as e:
        logger.warning("Preflight check failed: %s", e, exc_info=True)
        return invalid_payload_result(f"check failed: {e}")

    result = PreflightResult(issues=tuple(issues), summary=summarize(issues), **reports)
    logger.debug(
        "Preflight: %d issue(s), can_proceed=%s", len(result.issues), result.can_proceed
    )
    return result
