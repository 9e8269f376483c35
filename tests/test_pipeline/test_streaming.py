"""Tests for section-by-section conversion."""

import pytest

from flowbridge.emit.ids import IdRegistry
from flowbridge.events import (
    ConversionBlocked,
    ConversionCompleted,
    EventBus,
    PhaseStarted,
    SectionCompleted,
    SectionStarted,
)
from flowbridge.model.declarations import parse_style_less
from flowbridge.pipeline import (
    PHASES,
    ConversionCancelled,
    ConversionProgress,
    Section,
    SectionResult,
    SectionsResult,
    convert_sections,
    iter_convert_sections,
    split_sections,
)
from flowbridge.safety import SafetyGate


def _sections(*css: str) -> list[Section]:
    return [Section(id=f"section-{i + 1}", name=f"part {i + 1}", css=text) for i, text in enumerate(css)]


def _explode(payload):
    raise RuntimeError("sanitizer unavailable")


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


class TestSplitSections:
    def test_markers(self):
        sections = split_sections("/* @section Hero */ .a { color: red; } /* @section Footer */ .b { color: blue; }")
        assert [(s.id, s.name) for s in sections] == [("section-1", "Hero"), ("section-2", "Footer")]
        assert ".a" in sections[0].css
        assert ".b" not in sections[0].css

    def test_leading_css_becomes_main(self):
        sections = split_sections(".x { color: red; }\n/* @section Hero */ .a { color: red; }")
        assert [s.name for s in sections] == ["main", "Hero"]
        assert [s.id for s in sections] == ["section-1", "section-2"]

    def test_no_markers(self):
        (section,) = split_sections(".a { color: red; }")
        assert section.name == "main"
        assert section.css == ".a { color: red; }"


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


class TestIterConvertSections:
    def test_phase_order(self):
        items = list(iter_convert_sections(_sections(".a { color: red; }", ".b { color: blue; }")))
        phases = list(dict.fromkeys(i.phase for i in items if isinstance(i, ConversionProgress)))
        assert tuple(phases) == PHASES

    def test_section_results_in_document_order(self):
        items = list(iter_convert_sections(_sections(".a { color: red; }", ".b { color: blue; }")))
        results = [i for i in items if isinstance(i, SectionResult)]
        assert [r.section.id for r in results] == ["section-1", "section-2"]
        assert [r.styles[0]["name"] for r in results] == ["a", "b"]

    def test_final_item_is_result(self):
        items = list(iter_convert_sections(_sections(".a { color: red; }")))
        assert isinstance(items[-1], SectionsResult)
        assert items[-1].can_proceed

    def test_first_definition_wins_across_sections(self):
        result = convert_sections(_sections(".a { color: red; }", ".a { color: blue; }"))
        (style,) = result.payload["payload"]["styles"]
        assert parse_style_less(style["styleLess"])["color"] == "red"

    def test_non_standard_css_merged_into_one_embed(self):
        result = convert_sections(_sections(
            "@media print { .a { color: black; } }",
            "@media print { .b { color: black; } }",
        ))
        (embed,) = result.payload["payload"]["nodes"]
        html = embed["data"]["embed"]["meta"]["html"]
        assert ".a" in html and ".b" in html

    def test_progress_callback(self):
        seen: list[ConversionProgress] = []
        convert_sections(_sections(".a { color: red; }"), on_progress=seen.append)
        assert seen[0].phase == "parsing"
        assert seen[-1].phase == "complete"
        assert seen[-1].percentage == 100

    def test_section_nodes_share_style_ids(self):
        registry = IdRegistry()
        node = {"_id": "n1", "type": "Block", "tag": "div", "classes": [registry.style_id("a")], "children": []}
        section = Section(id="section-1", name="main", css=".a { color: red; }", nodes=(node,))
        result = convert_sections([section], registry=registry)
        assert result.gate.final.is_valid
        (style,) = result.payload["payload"]["styles"]
        assert result.payload["payload"]["nodes"][0]["classes"] == [style["_id"]]

    def test_empty_registry_is_used(self):
        result = convert_sections(_sections(".a { color: red; }"), registry=IdRegistry("site"))
        (style,) = result.payload["payload"]["styles"]
        assert style["_id"] == "site-style-001"

    def test_gate_passed_through(self):
        cyclic = (
            {"_id": "A", "type": "Block", "tag": "div", "classes": [], "children": ["B"]},
            {"_id": "B", "type": "Block", "tag": "div", "classes": [], "children": ["A"]},
        )
        sections = [Section(id="section-1", name="main", css="", nodes=cyclic)]
        assert convert_sections(sections).can_proceed
        result = convert_sections(sections, gate=SafetyGate(sanitizer=_explode))
        assert not result.can_proceed
        assert result.payload is None


class TestConvertSectionsResult:
    def test_missing_final_result_raises(self, monkeypatch):
        import flowbridge.pipeline.streaming as streaming

        monkeypatch.setattr(streaming, "iter_convert_sections", lambda *args, **kwargs: iter(()))
        with pytest.raises(RuntimeError, match="without a result"):
            streaming.convert_sections([])


class TestCancellation:
    def test_cancel_before_start(self):
        with pytest.raises(ConversionCancelled) as excinfo:
            list(iter_convert_sections(_sections(".a { color: red; }"), should_cancel=lambda: True))
        assert excinfo.value.phase == "parsing"

    def test_cancel_between_sections(self):
        bus = EventBus()
        cancelled = []
        bus.subscribe(SectionCompleted, lambda e: cancelled.append(e.section_id))
        items = []
        with pytest.raises(ConversionCancelled) as excinfo:
            for item in iter_convert_sections(
                _sections(".a { color: red; }", ".b { color: blue; }"),
                should_cancel=lambda: bool(cancelled),
                event_bus=bus,
            ):
                items.append(item)
        assert excinfo.value.phase == "generating"
        assert [i.section.id for i in items if isinstance(i, SectionResult)] == ["section-1"]


class TestEvents:
    def test_lifecycle_events(self):
        bus = EventBus()
        events = []
        bus.on_all(events.append)
        convert_sections(_sections(".a { color: red; }", ".b { color: blue; }"), event_bus=bus)
        assert [type(e) for e in events] == [
            PhaseStarted,
            PhaseStarted,
            SectionStarted,
            SectionStarted,
            PhaseStarted,
            SectionCompleted,
            SectionCompleted,
            PhaseStarted,
            ConversionCompleted,
        ]
        assert events[-1].style_count == 2

    def test_blocked_event(self):
        def explode(payload):
            raise RuntimeError("boom")

        bus = EventBus()
        blocked = []
        bus.subscribe(ConversionBlocked, blocked.append)
        section = Section(
            id="section-1",
            name="main",
            css=".a { color: red; }",
            nodes=(
                {"_id": "A", "type": "Block", "tag": "div", "classes": [], "children": ["B"]},
                {"_id": "B", "type": "Block", "tag": "div", "classes": [], "children": ["A"]},
            ),
        )
        items = list(iter_convert_sections([section], event_bus=bus, gate=SafetyGate(sanitizer=explode)))
        assert items[-1].payload is None
        assert not items[-1].can_proceed
        assert blocked[0].blocking_issue_count >= 1
