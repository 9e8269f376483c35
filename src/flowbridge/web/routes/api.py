from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from flowbridge import __version__
from flowbridge.pipeline import convert_css
from flowbridge.safety.gate import SafetyGate
from flowbridge.validation import run_preflight

api_bp = Blueprint("api", __name__)


@api_bp.after_request
def add_cors_headers(response):
    """Allow cross-origin requests to the API."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


@api_bp.route("/convert", methods=["OPTIONS"])
@api_bp.route("/validate", methods=["OPTIONS"])
def preflight():
    """Handle CORS preflight for the POST endpoints."""
    return "", 204


@api_bp.route("/convert", methods=["POST"])
def convert():
    """Compile CSS into a payload and gate it.

    200 when the payload can proceed, 422 when the gate blocks it.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("css"), str):
        return jsonify({"error": "css required"}), 400

    config = current_app.extensions["converter_config"]
    gate = current_app.extensions["safety_gate"]
    if "force_visible" in data:
        config = config.with_overrides(force_visible=bool(data["force_visible"]))
        gate = SafetyGate(config=config)

    result = convert_css(data["css"], config, gate=gate)
    body = result.to_dict()
    return jsonify(body), 200 if result.can_proceed else 422


@api_bp.route("/validate", methods=["POST"])
def validate():
    """Run the preflight validator on a posted payload."""
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "JSON payload required"}), 400
    result = run_preflight(data, config=current_app.extensions["converter_config"])
    return jsonify(result.to_dict())


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "version": __version__})
