"""Tests for one-shot conversion."""

from flowbridge.config import ConverterConfig
from flowbridge.emit.ids import IdRegistry
from flowbridge.model.payload import PAYLOAD_TYPE
from flowbridge.pipeline import convert_css
from flowbridge.safety import SafetyGate


def _block(nid: str, *children: str, classes=()) -> dict:
    return {"_id": nid, "type": "Block", "tag": "div", "classes": list(classes), "children": list(children)}


def _explode(payload):
    raise RuntimeError("sanitizer unavailable")


class TestConvertCss:
    def test_styles_in_envelope(self):
        result = convert_css(".hero { color: red; } .card { padding: 10px; }")
        assert result.can_proceed
        assert result.payload["type"] == PAYLOAD_TYPE
        names = [s["name"] for s in result.payload["payload"]["styles"]]
        assert names == ["hero", "card"]

    def test_empty_css(self):
        result = convert_css("")
        assert result.can_proceed
        assert result.payload["payload"]["styles"] == []

    def test_nodes_share_style_ids(self):
        registry = IdRegistry()
        node = _block("n1", classes=[registry.style_id("hero")])
        result = convert_css(".hero { color: red; }", nodes=[node], registry=registry)
        assert result.gate.final.is_valid
        style = result.payload["payload"]["styles"][0]
        assert result.payload["payload"]["nodes"][0]["classes"] == [style["_id"]]

    def test_empty_registry_is_used(self):
        result = convert_css(".hero { color: red; }", registry=IdRegistry("site"))
        assert result.payload["payload"]["styles"][0]["_id"] == "site-style-001"

    def test_non_standard_css_embedded(self):
        result = convert_css("@media print { .a { color: black; } } .b { color: red; }")
        (node,) = result.payload["payload"]["nodes"]
        assert node["type"] == "HtmlEmbed"
        assert "@media print" in node["data"]["embed"]["meta"]["html"]

    def test_embedding_can_be_disabled(self):
        config = ConverterConfig(embed_non_standard_css=False)
        result = convert_css("@media print { .a { color: black; } }", config)
        assert result.payload["payload"]["nodes"] == []

    def test_warnings_exposed(self):
        result = convert_css("@media print { .a { color: black; } }")
        assert any(w.kind == "non_standard_media" for w in result.warnings)

    def test_id_prefix_from_config(self):
        result = convert_css(".hero { color: red; }", ConverterConfig(id_prefix="acme"))
        assert result.payload["payload"]["styles"][0]["_id"] == "acme-style-001"


class TestConvertBlocked:
    def test_payload_withheld(self):
        result = convert_css(
            ".hero { color: red; }",
            nodes=[_block("A", "B"), _block("B", "A")],
            gate=SafetyGate(sanitizer=_explode),
        )
        assert not result.can_proceed
        assert result.payload is None
        assert result.raw_payload["payload"]["nodes"]

    def test_to_dict(self):
        result = convert_css(
            ".hero { color: red; }",
            nodes=[_block("A", "B"), _block("B", "A")],
            gate=SafetyGate(sanitizer=_explode),
        )
        data = result.to_dict()
        assert data["payload"] is None
        assert data["canProceed"] is False
        assert any(issue["code"] == "CIRCULAR_REFERENCE" for issue in data["issues"])

    def test_sanitized_conversion_proceeds(self):
        result = convert_css(".hero { color: red; }", nodes=[_block("A", "B"), _block("B", "A")])
        assert result.can_proceed
        assert result.gate.sanitized
        assert result.to_dict()["changes"] == ["Broke circular node reference: B -> A"]
