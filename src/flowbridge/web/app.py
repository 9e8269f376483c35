from __future__ import annotations

from flask import Flask

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.safety.gate import SafetyGate


def create_app(config: ConverterConfig | None = None, flask_config: dict | None = None) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    app.config.update(flask_config or {})

    # Converter config and gate shared by all requests
    converter_config = resolve_config(config)
    app.extensions["converter_config"] = converter_config
    app.extensions["safety_gate"] = SafetyGate(config=converter_config)

    from flowbridge.web.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    return app
