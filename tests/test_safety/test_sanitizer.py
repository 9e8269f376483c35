"""Tests for the default payload sanitizer."""

import pytest

from flowbridge.emit.ids import IdRegistry
from flowbridge.safety.sanitizer import (
    break_circular_references,
    fix_duplicate_ids,
    fix_invalid_ids,
    fix_text_nodes,
    remove_invalid_variants,
    remove_orphan_children,
    rename_reserved_styles,
    sanitize_payload,
)
from flowbridge.validation import PayloadShapeError, run_preflight


def _node(nid: str, *children: str, **extra) -> dict:
    node = {"_id": nid, "type": "Block", "tag": "div", "classes": [], "children": list(children)}
    node.update(extra)
    return node


def _style(sid: str, name: str, **extra) -> dict:
    style = {"_id": sid, "name": name, "styleLess": "", "variants": {}, "children": []}
    style.update(extra)
    return style


def _payload(nodes=(), styles=()) -> dict:
    return {"type": "@webflow/XscpData", "payload": {"nodes": list(nodes), "styles": list(styles)}}


# ---------------------------------------------------------------------------
# Identifier repairs
# ---------------------------------------------------------------------------


class TestDuplicateIds:
    def test_second_occurrence_regenerated(self):
        nodes = [_node("root", "a"), _node("a"), _node("a")]
        changes = fix_duplicate_ids(nodes, [], IdRegistry("fix"))
        assert [n["_id"] for n in nodes] == ["root", "a", "fix-node-001"]
        assert changes == ["Regenerated duplicate node ID: a -> fix-node-001"]

    def test_references_follow_regenerated_id(self):
        nodes = [_node("root", "a"), _node("a"), _node("a")]
        fix_duplicate_ids(nodes, [], IdRegistry("fix"))
        assert nodes[0]["children"] == ["fix-node-001"]

    def test_duplicate_style_remaps_classes(self):
        nodes = [_node("n", classes=["s"])]
        styles = [_style("s", "one"), _style("s", "two")]
        fix_duplicate_ids(nodes, styles, IdRegistry("fix"))
        assert styles[1]["_id"] == "fix-style-001"
        assert nodes[0]["classes"] == ["fix-style-001"]

    def test_fresh_id_skips_taken(self):
        nodes = [_node("fix-node-001"), _node("x"), _node("x")]
        fix_duplicate_ids(nodes, [], IdRegistry("fix"))
        assert nodes[2]["_id"] == "fix-node-002"


class TestInvalidIds:
    def test_replaced_and_remapped(self):
        nodes = [_node("root", "bad id"), _node("bad id")]
        changes = fix_invalid_ids(nodes, [], IdRegistry("fix"))
        assert nodes[1]["_id"] == "fix-node-001"
        assert nodes[0]["children"] == ["fix-node-001"]
        assert changes == ["Replaced invalid node ID: 'bad id' -> fix-node-001"]

    def test_missing_id(self):
        nodes = [{"type": "Block", "tag": "div", "children": []}]
        fix_invalid_ids(nodes, [], IdRegistry("fix"))
        assert nodes[0]["_id"] == "fix-node-001"


# ---------------------------------------------------------------------------
# Graph repairs
# ---------------------------------------------------------------------------


class TestBreakCircular:
    def test_closing_edge_removed(self):
        nodes = [_node("A", "B"), _node("B", "C"), _node("C", "A")]
        changes = break_circular_references(nodes)
        assert changes == ["Broke circular node reference: C -> A"]
        assert nodes[2]["children"] == []
        assert nodes[0]["children"] == ["B"]

    def test_walks_from_roots_first(self):
        nodes = [_node("A", "B"), _node("B", "A"), _node("R", "B")]
        changes = break_circular_references(nodes)
        assert changes == ["Broke circular node reference: A -> B"]

    def test_self_loop(self):
        nodes = [_node("A", "A", "B"), _node("B")]
        break_circular_references(nodes)
        assert nodes[0]["children"] == ["B"]

    def test_shared_child_kept(self):
        nodes = [_node("R", "A", "B"), _node("A", "C"), _node("B", "C"), _node("C")]
        assert break_circular_references(nodes) == []
        assert nodes[2]["children"] == ["C"]


class TestOrphansAndText:
    def test_orphan_removed(self):
        nodes = [_node("A", "B", "X"), _node("B")]
        changes = remove_orphan_children(nodes)
        assert nodes[0]["children"] == ["B"]
        assert changes == ["Removed orphan child reference: A -> X"]

    def test_text_node_made_leaf(self):
        nodes = [{"_id": "t", "text": True, "children": ["c"]}]
        changes = fix_text_nodes(nodes)
        assert nodes[0]["children"] == []
        assert nodes[0]["v"] == ""
        assert len(changes) == 2

    def test_valid_text_node_untouched(self):
        nodes = [{"_id": "t", "text": True, "v": "hello", "children": []}]
        assert fix_text_nodes(nodes) == []


# ---------------------------------------------------------------------------
# Style repairs
# ---------------------------------------------------------------------------


class TestStyleRepairs:
    def test_invalid_variant_removed(self):
        styles = [_style("s", "card", variants={"huge": {"styleLess": ""}, "small": {"styleLess": ""}})]
        changes = remove_invalid_variants(styles)
        assert list(styles[0]["variants"]) == ["small"]
        assert changes == ['Removed invalid variant "huge" from style "card"']

    def test_reserved_name_renamed(self):
        styles = [_style("s", "w-button")]
        changes = rename_reserved_styles(styles)
        assert styles[0]["name"] == "custom-button"
        assert changes == ["Renamed reserved class: w-button -> custom-button"]

    def test_rename_avoids_collision(self):
        styles = [_style("s1", "w-nav"), _style("s2", "custom-nav")]
        rename_reserved_styles(styles)
        assert styles[0]["name"] == "custom-nav-2"


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestSanitizePayload:
    def test_input_not_mutated(self):
        payload = _payload([_node("A", "B"), _node("B", "A")])
        report = sanitize_payload(payload)
        assert payload["payload"]["nodes"][1]["children"] == ["A"]
        assert report.changed

    def test_result_passes_preflight(self):
        payload = _payload(
            [_node("A", "B", "X"), _node("B", "A"), _node("B"), _node("t t")],
            [_style("s", "w-row", variants={"bogus": {}})],
        )
        report = sanitize_payload(payload)
        assert run_preflight(report.payload).can_proceed

    def test_inner_payload_shape_preserved(self):
        report = sanitize_payload({"nodes": [_node("A", "A")], "styles": []})
        assert "payload" not in report.payload
        assert report.payload["nodes"][0]["children"] == []

    def test_clean_payload_unchanged(self):
        payload = _payload([_node("A")])
        report = sanitize_payload(payload)
        assert not report.changed
        assert report.payload == payload

    def test_not_a_payload(self):
        with pytest.raises(PayloadShapeError):
            sanitize_payload("nope")
