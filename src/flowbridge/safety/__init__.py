"""Safety gate and default sanitizer."""

from flowbridge.safety.gate import GateResult, PayloadBlockedError, SafetyGate, gate_or_raise, gate_payload
from flowbridge.safety.sanitizer import SANITIZE_STEPS, SanitizeReport, sanitize_payload

__all__ = [
    "GateResult",
    "PayloadBlockedError",
    "SANITIZE_STEPS",
    "SafetyGate",
    "SanitizeReport",
    "gate_or_raise",
    "gate_payload",
    "sanitize_payload",
]
