from __future__ import annotations

from flowbridge import __version__


def _block(nid: str, *children: str) -> dict:
    return {"_id": nid, "type": "Block", "tag": "div", "classes": [], "children": list(children)}


# ---------------------------------------------------------------------------
# POST /api/convert
# ---------------------------------------------------------------------------


class TestConvert:
    def test_returns_payload(self, client):
        resp = client.post("/api/convert", json={"css": ".hero { color: red; }"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["canProceed"] is True
        assert data["payload"]["payload"]["styles"][0]["name"] == "hero"
        assert data["warnings"] == []

    def test_missing_css(self, client):
        resp = client.post("/api/convert", json={"html": "<div></div>"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "css required"}

    def test_not_json(self, client):
        resp = client.post("/api/convert", data="css", content_type="text/plain")
        assert resp.status_code == 400

    def test_force_visible_override(self, client):
        css = ".fade { opacity: 0; }"
        forced = client.post("/api/convert", json={"css": css}).get_json()
        kept = client.post("/api/convert", json={"css": css, "force_visible": False}).get_json()
        assert "opacity: 1" in forced["payload"]["payload"]["styles"][0]["styleLess"]
        assert "opacity: 0" in kept["payload"]["payload"]["styles"][0]["styleLess"]

    def test_blocked_payload_is_422(self, strict_client):
        resp = strict_client.post("/api/convert", json={"css": "@media print { .a { color: black; } }"})
        assert resp.status_code == 422
        data = resp.get_json()
        assert data["payload"] is None
        assert data["canProceed"] is False
        assert any(issue["code"] == "EMBED_SIZE_EXCEEDED" for issue in data["issues"])


# ---------------------------------------------------------------------------
# POST /api/validate
# ---------------------------------------------------------------------------


class TestValidate:
    def test_valid_payload(self, client):
        payload = {"type": "@webflow/XscpData", "payload": {"nodes": [_block("root")], "styles": []}}
        data = client.post("/api/validate", json=payload).get_json()
        assert data["isValid"] is True
        assert data["summary"] == "All validations passed"

    def test_cycle_reported(self, client):
        payload = {"payload": {"nodes": [_block("A", "B"), _block("B", "A")], "styles": []}}
        data = client.post("/api/validate", json=payload).get_json()
        assert data["canProceed"] is False
        assert data["circular"]["cycles"] == [["A", "B", "A"]]

    def test_wrong_shape_is_fatal_not_500(self, client):
        resp = client.post("/api/validate", json=[1, 2, 3])
        assert resp.status_code == 200
        assert resp.get_json()["issues"][0]["code"] == "INVALID_PAYLOAD"

    def test_non_string_type_is_reported(self, client):
        node = _block("root")
        node["type"] = ["Block"]
        resp = client.post("/api/validate", json={"payload": {"nodes": [node], "styles": []}})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["canProceed"] is False
        assert data["nodeStructure"]["errors"] == ["Node root has non-string type: ['Block']"]

    def test_missing_body(self, client):
        resp = client.post("/api/validate", data="", content_type="application/json")
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Health and CORS
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok", "version": __version__}


class TestCors:
    def test_headers_on_response(self, client):
        resp = client.get("/api/health")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_options_preflight(self, client):
        resp = client.options("/api/convert")
        assert resp.status_code == 204
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]
