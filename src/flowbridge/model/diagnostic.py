"""Diagnostic model: severity-tagged findings from the compiler and validator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity level for a finding.

    FATAL and ERROR block a payload; WARNING and INFO never do.
    """

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def blocks(self) -> bool:
        return self in (Severity.FATAL, Severity.ERROR)


@dataclass(frozen=True)
class ValidationIssue:
    """A single validator finding about an emitted payload.

    Attributes:
        severity: How serious the issue is.
        code: Stable identifier such as ``DUPLICATE_UUID``.
        message: Human-readable description of the problem.
        context: The node, style or declaration involved, if applicable.
        suggestion: Suggested remediation, if available.
    """

    severity: Severity
    code: str
    message: str
    context: str | None = None
    suggestion: str | None = None

    @property
    def is_blocking(self) -> bool:
        return self.severity.blocks

    def to_dict(self) -> dict[str, str]:
        data = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if self.context is not None:
            data["context"] = self.context
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data

    def __str__(self) -> str:
        location = f" [{self.context}]" if self.context else ""
        return f"{self.severity.value.upper()} {self.code}{location}: {self.message}"


@dataclass(frozen=True)
class ParseWarning:
    """A non-fatal note recorded while compiling CSS.

    ``kind`` is one of ``unsupported_property``, ``unsupported_selector``,
    ``complex_selector``, ``animation``, ``variable_unresolved``,
    ``breakpoint_unmapped``, ``breakpoint_rounded``,
    ``non_standard_media`` or ``layout_defaults``.
    """

    kind: str
    message: str
    selector: str | None = None
    property: str | None = None
    severity: Severity = Severity.WARNING

    def to_dict(self) -> dict[str, str]:
        data = {"type": self.kind, "message": self.message, "severity": self.severity.value}
        if self.selector is not None:
            data["selector"] = self.selector
        if self.property is not None:
            data["property"] = self.property
        return data

    def __str__(self) -> str:
        return f"{self.severity.value.upper()} {self.kind}: {self.message}"


class DiagnosticCollector:
    """Accumulates parse warnings for a single compile run."""

    def __init__(self) -> None:
        self._warnings: list[ParseWarning] = []

    def warn(
        self,
        kind: str,
        message: str,
        *,
        selector: str | None = None,
        property: str | None = None,
    ) -> None:
        self._warnings.append(
            ParseWarning(kind=kind, message=message, selector=selector, property=property)
        )

    def info(
        self,
        kind: str,
        message: str,
        *,
        selector: str | None = None,
        property: str | None = None,
    ) -> None:
        self._warnings.append(
            ParseWarning(
                kind=kind,
                message=message,
                selector=selector,
                property=property,
                severity=Severity.INFO,
            )
        )

    def extend(self, warnings: list[ParseWarning] | tuple[ParseWarning, ...]) -> None:
        self._warnings.extend(warnings)

    @property
    def warnings(self) -> tuple[ParseWarning, ...]:
        return tuple(self._warnings)

    def of_kind(self, kind: str) -> list[ParseWarning]:
        return [w for w in self._warnings if w.kind == kind]

    def __len__(self) -> int:
        return len(self._warnings)

    def __iter__(self):
        return iter(self._warnings)
