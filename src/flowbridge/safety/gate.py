"""Safety gate: validate, sanitize once, re-validate, block if still unsafe."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.model.diagnostic import ValidationIssue
from flowbridge.safety.sanitizer import SanitizeReport, sanitize_payload
from flowbridge.validation.preflight import PreflightResult, invalid_payload_result, run_preflight

__all__ = ["GateResult", "PayloadBlockedError", "SafetyGate", "gate_or_raise", "gate_payload"]

logger = logging.getLogger(__name__)

Sanitizer = Callable[[Any], SanitizeReport]


@dataclass(frozen=True)
class GateResult:
    """Verdict of the safety gate.

    ``payload`` is the sanitized copy when sanitization ran, otherwise the
    input. ``final`` is the preflight result the verdict is based on.
    """

    can_proceed: bool
    payload: Any
    initial: PreflightResult
    final: PreflightResult
    sanitized: bool = False
    changes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def blocked(self) -> bool:
        return not self.can_proceed

    @property
    def issues(self) -> tuple[ValidationIssue, ...]:
        return self.final.issues

    @property
    def summary(self) -> str:
        return self.final.summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "canProceed": self.can_proceed,
            "sanitized": self.sanitized,
            "changes": list(self.changes),
            "summary": self.summary,
            "issues": [issue.to_dict() for issue in self.issues],
        }


class PayloadBlockedError(Exception):
    """Raised by ``gate_or_raise`` when the gate blocks a payload."""

    def __init__(self, result: GateResult) -> None:
        self.result = result
        blocking = result.final.blocking_issues
        super().__init__(
            f"Payload blocked with {len(blocking)} blocking issue(s): "
            + "; ".join(issue.message for issue in blocking)
        )


class SafetyGate:
    """Fail-closed gate in front of payload emission.

    The payload is validated; if blocking issues exist the sanitizer is
    applied once and the result validated again. Anything still blocking
    after that is refused.
    """

    def __init__(
        self,
        sanitizer: Sanitizer = sanitize_payload,
        config: ConverterConfig | None = None,
    ) -> None:
        self.sanitizer = sanitizer
        self.config = resolve_config(config)

    def check(self, payload: Any, *, extra_css: str = "", extra_js: str = "") -> GateResult:
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                result = invalid_payload_result(f"not valid JSON ({e})")
                logger.warning("Blocked payload: invalid JSON")
                return GateResult(False, None, result, result)

        initial = run_preflight(payload, config=self.config, extra_css=extra_css, extra_js=extra_js)
        if initial.can_proceed:
            logger.info("Gate passed: %d non-blocking issue(s)", len(initial.issues))
            return GateResult(True, payload, initial, initial)

        logger.info("Gate found %d blocking issue(s); sanitizing", len(initial.blocking_issues))
        try:
            report = self.sanitizer(payload)
        except Exception as e:
            logger.warning("Blocked payload: sanitizer failed: %s", e)
            return GateResult(False, payload, initial, initial)

        final = run_preflight(report.payload, config=self.config, extra_css=extra_css, extra_js=extra_js)
        result = GateResult(
            can_proceed=final.can_proceed,
            payload=report.payload,
            initial=initial,
            final=final,
            sanitized=True,
            changes=tuple(report.changes),
        )
        if result.can_proceed:
            logger.info("Gate passed after %d sanitizer change(s)", len(report.changes))
        else:
            logger.warning(
                "Blocked payload: %d blocking issue(s) remain after sanitizing",
                len(final.blocking_issues),
            )
        return result


def gate_payload(payload: Any, *, config: ConverterConfig | None = None, sanitizer: Sanitizer = sanitize_payload) -> GateResult:
    """Run *payload* through a ``SafetyGate`` with the default sanitizer."""
    return SafetyGate(sanitizer=sanitizer, config=config).check(payload)


def gate_or_raise(payload: Any, *, config: ConverterConfig | None = None, sanitizer: Sanitizer = sanitize_payload) -> Any:
    """Return the (possibly sanitized) payload; raises :class:`PayloadBlockedError` if blocked."""
    result = gate_payload(payload, config=config, sanitizer=sanitizer)
    if not result.can_proceed:
        raise PayloadBlockedError(result)
    return result.payload
