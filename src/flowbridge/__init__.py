"""flowbridge - compile CSS into Webflow clipboard payloads and gate them for safety."""

__version__ = "0.1.0"

from flowbridge.css.resolver import build_class_index  # noqa: E402
from flowbridge.pipeline.convert import convert_css  # noqa: E402
from flowbridge.safety.gate import gate_payload  # noqa: E402
from flowbridge.validation.preflight import run_preflight  # noqa: E402

__all__ = [
    "__version__",
    "build_class_index",
    "convert_css",
    "gate_payload",
    "run_preflight",
]
