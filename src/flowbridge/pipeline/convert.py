"""One-shot conversion: CSS text to a gated clipboard payload."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.css.resolver import build_class_index
from flowbridge.emit.emitter import embed_node, emit_styles
from flowbridge.emit.ids import IdRegistry
from flowbridge.model.class_index import ClassIndex
from flowbridge.model.diagnostic import ParseWarning
from flowbridge.model.payload import WebflowNode, WebflowStyle, build_payload
from flowbridge.safety.gate import GateResult, SafetyGate

__all__ = ["ConversionResult", "assemble_payload", "convert_css"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Everything one conversion produced.

    ``payload`` is the gated payload, or ``None`` when the gate blocked it.
    ``raw_payload`` is always the payload as emitted, before the gate.
    """

    index: ClassIndex
    styles: tuple[WebflowStyle, ...]
    raw_payload: dict[str, Any]
    gate: GateResult

    @property
    def payload(self) -> Any:
        return self.gate.payload if self.gate.can_proceed else None

    @property
    def can_proceed(self) -> bool:
        return self.gate.can_proceed

    @property
    def warnings(self) -> tuple[ParseWarning, ...]:
        return self.index.warnings

    def to_dict(self) -> dict[str, Any]:
        return {
            "payload": self.payload,
            "canProceed": self.can_proceed,
            "issues": [issue.to_dict() for issue in self.gate.issues],
            "summary": self.gate.summary,
            "warnings": [w.to_dict() for w in self.warnings],
            "sanitized": self.gate.sanitized,
            "changes": list(self.gate.changes),
        }


def assemble_payload(
    styles: Iterable[WebflowStyle | Mapping[str, Any]],
    nodes: Iterable[WebflowNode | Mapping[str, Any]],
    non_standard_css: str,
    registry: IdRegistry,
    config: ConverterConfig,
) -> dict[str, Any]:
    """Build the envelope, appending the non-standard CSS embed when enabled."""
    nodes = list(nodes)
    if non_standard_css.strip() and config.embed_non_standard_css:
        nodes.append(embed_node(non_standard_css, registry))
    return build_payload(styles, nodes)


def convert_css(
    css: str,
    config: ConverterConfig | None = None,
    *,
    nodes: Iterable[WebflowNode | Mapping[str, Any]] = (),
    registry: IdRegistry | None = None,
    gate: SafetyGate | None = None,
) -> ConversionResult:
    """Compile *css*, emit styles, wrap them in a payload and gate it.

    Args:
        css: Stylesheet text.
        config: Converter configuration; ``None`` uses defaults.
        nodes: Element nodes to ship alongside the styles. Their class
            lists must use ids from *registry*.
        registry: Identifier registry shared with the node producer.
        gate: Safety gate to use; defaults to one with the default sanitizer.
    """
    config = resolve_config(config)
    if registry is None:
        registry = IdRegistry(config.id_prefix)
    gate = gate or SafetyGate(config=config)

    index = build_class_index(css, config)
    styles = emit_styles(index, registry, config)
    raw = assemble_payload(styles, nodes, index.non_standard_media_css, registry, config)
    verdict = gate.check(raw)
    logger.info(
        "Converted %d styles (%d warnings), can_proceed=%s",
        len(styles),
        len(index.warnings),
        verdict.can_proceed,
    )
    return ConversionResult(index=index, styles=tuple(styles), raw_payload=raw, gate=verdict)
