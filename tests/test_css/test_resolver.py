"""Tests for the cascade resolver and breakpoint router."""

import pytest

from flowbridge.config import DEFAULT_CONFIG, ConverterConfig
from flowbridge.css.resolver import _IndexBuilder, build_class_index, invert_min_width
from flowbridge.css.selectors import parse_selector
from flowbridge.css.variables import VariableTable
from flowbridge.model.class_index import ClassIndexEntry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _entry(css: str, name: str) -> ClassIndexEntry:
    index = build_class_index(css)
    entry = index.get(name)
    assert entry is not None, f"no entry for {name}"
    return entry


def _kinds(css: str) -> list[str]:
    return [w.kind for w in build_class_index(css).warnings]


# ---------------------------------------------------------------------------
# Base scope
# ---------------------------------------------------------------------------


class TestBaseRules:
    def test_later_rule_wins(self):
        entry = _entry(".a { color: red; } .a { color: blue; }", "a")
        assert entry.base["color"] == "blue"

    def test_selector_list_applies_to_each_class(self):
        index = build_class_index(".a, .b { color: red; }")
        assert index.get("a").base == {"color": "red"}
        assert index.get("b").base == {"color": "red"}

    def test_pseudo_states_bucketed(self):
        entry = _entry(".btn { color: red; } .btn:hover { color: blue; }", "btn")
        assert entry.pseudo["hover"] == {"color": "blue"}
        assert entry.base == {"color": "red"}

    def test_padding_expanded(self):
        entry = _entry(".a { padding: 10px; }", "a")
        assert entry.base == {
            "padding-top": "10px",
            "padding-right": "10px",
            "padding-bottom": "10px",
            "padding-left": "10px",
        }

    def test_variables_resolved(self):
        entry = _entry(":root { --brand: #0af; } .a { color: var(--brand); }", "a")
        assert entry.base["color"] == "#0af"

    def test_unresolved_variable_warns(self):
        assert "variable_unresolved" in _kinds(".a { color: var(--nope); }")

    def test_unsupported_property_warns(self):
        assert "unsupported_property" in _kinds(".a { clip-path: circle(50%); }")

    def test_transition_stripped_silently(self):
        index = build_class_index(".a { transition: all 1s; color: red; }")
        assert index.get("a").base == {"color": "red"}
        assert not index.warnings


class TestSelectorRelationships:
    def test_combo_recorded(self):
        index = build_class_index(".btn { color: red; } .btn.is-big { font-size: 20px; }")
        assert index.get("is-big").is_combo
        assert "is-big" in index.get("btn").children

    def test_descendant_flattened_with_warning(self):
        index = build_class_index(".nav .link { color: red; }")
        link = index.get("link")
        assert link.base == {"color": "red"}
        assert link.parent_classes == ["nav"]
        assert "link" in index.get("nav").children
        assert [w.kind for w in index.warnings] == ["complex_selector"]

    def test_pseudo_element_skipped(self):
        index = build_class_index(".a::before { color: red; }")
        assert index.get("a") is None
        assert index.warnings_of("unsupported_selector")


# ---------------------------------------------------------------------------
# Media routing
# ---------------------------------------------------------------------------


class TestMediaRouting:
    def test_max_width_routes_to_tier(self):
        entry = _entry(".a { color: red; } @media (max-width: 767px) { .a { color: blue; } }", "a")
        assert entry.breakpoints["small"] == {"color": "blue"}
        assert entry.base == {"color": "red"}

    def test_min_width_1920_routes_to_xxxlarge(self):
        entry = _entry("@media (min-width: 1920px) { .a { color: blue; } }", "a")
        assert entry.breakpoints == {"xxxlarge": {"color": "blue"}}

    def test_cascade_inversion(self):
        css = ".a { color: red; } @media (min-width: 992px) { .a { color: blue; } }"
        entry = _entry(css, "a")
        assert entry.base["color"] == "blue"
        for tier in ("medium", "small", "tiny"):
            assert entry.breakpoints[tier]["color"] == "red"

    def test_inversion_does_not_overwrite_existing_tier_value(self):
        css = (
            ".a { color: red; }"
            "@media (max-width: 767px) { .a { color: green; } }"
            "@media (min-width: 992px) { .a { color: blue; } }"
        )
        entry = _entry(css, "a")
        assert entry.breakpoints["small"]["color"] == "green"
        assert entry.breakpoints["medium"]["color"] == "red"

    def test_inversion_without_previous_value_adds_no_backfill(self):
        entry = _entry(".a { color: red; } @media (min-width: 768px) { .a { margin-top: 4px; } }", "a")
        assert entry.base["margin-top"] == "4px"
        assert "small" not in entry.breakpoints

    def test_non_standard_media_diverted(self):
        css = "@media print { .a { color: black; } } .b { color: red; }"
        index = build_class_index(css)
        assert index.get("a") is None
        assert "@media print" in index.non_standard_media_css
        assert index.warnings_of("non_standard_media")

    def test_rounding_note_is_info(self):
        index = build_class_index("@media (max-width: 700px) { .a { color: red; } }")
        (note,) = index.warnings_of("breakpoint_rounded")
        assert note.severity.value == "info"
        assert index.get("a").breakpoints["small"] == {"color": "red"}

    def test_pseudo_inside_media_skipped(self):
        index = build_class_index("@media (max-width: 767px) { .a:hover { color: red; } }")
        assert index.get("a") is None
        assert index.warnings_of("unsupported_selector")


class TestRegister:
    def test_classless_target_rejected(self):
        builder = _IndexBuilder(VariableTable(), DEFAULT_CONFIG)
        with pytest.raises(ValueError, match="names no class"):
            builder._register(parse_selector("#hero"), {"color": "red"}, at_base=True)

    def test_class_target_registered(self):
        builder = _IndexBuilder(VariableTable(), DEFAULT_CONFIG)
        entry = builder._register(parse_selector(".hero"), {"color": "red"}, at_base=True)
        assert entry.class_name == "hero"


class TestInvertMinWidth:
    def test_no_override_tiers_merges_into_base(self):
        entry = ClassIndexEntry("a", base={"color": "red"})
        invert_min_width(entry, {"color": "blue"}, ())
        assert entry.base == {"color": "blue"}
        assert entry.breakpoints == {}

    def test_backfill_preserves_existing(self):
        entry = ClassIndexEntry("a", base={"color": "red"}, breakpoints={"tiny": {"color": "black"}})
        invert_min_width(entry, {"color": "blue"}, ("small", "tiny"))
        assert entry.breakpoints["small"] == {"color": "red"}
        assert entry.breakpoints["tiny"] == {"color": "black"}


# ---------------------------------------------------------------------------
# At-rules, elements and layout
# ---------------------------------------------------------------------------


class TestAtRules:
    def test_keyframes_warn(self):
        assert _kinds("@keyframes spin { from { opacity: 0; } to { opacity: 1; } }") == ["animation"]

    def test_font_face_silent(self):
        index = build_class_index("@font-face { font-family: X; src: url(x.woff); }")
        assert len(index) == 0
        assert not index.warnings

    def test_container_diverted(self):
        index = build_class_index("@container (min-width: 400px) { .a { color: red; } }")
        assert "@container" in index.non_standard_media_css


class TestElementRecovery:
    def test_typography_recovered(self):
        entry = _entry("h1 { font-size: 48px; display: block; }", "heading-h1")
        assert entry.base == {"font-size": "48px"}

    def test_structural_spacing_recovered(self):
        entry = _entry("section { padding: 20px; background-color: red; }", "wf-section")
        assert entry.base["padding-top"] == "20px"
        assert "background-color" not in entry.base

    def test_class_declarations_win(self):
        entry = _entry("p { color: gray; font-size: 16px; } .text-body { color: black; }", "text-body")
        assert entry.base == {"color": "black", "font-size": "16px"}

    def test_element_in_media_ignored(self):
        index = build_class_index("@media (max-width: 767px) { h1 { font-size: 20px; } }")
        assert index.get("heading-h1") is None


class TestLayoutDefaults:
    def test_flex_defaults_injected(self):
        entry = _entry(".card { display: flex; }", "card")
        assert entry.base == {
            "display": "flex",
            "flex-direction": "row",
            "justify-content": "flex-start",
            "align-items": "stretch",
        }
        assert entry.is_layout_container

    def test_layout_warning_recorded(self):
        assert _kinds(".card { display: flex; }") == ["layout_defaults"]

    def test_explicit_values_kept(self):
        entry = _entry(".card { display: flex; flex-direction: column; }", "card")
        assert entry.base["flex-direction"] == "column"


class TestVariables:
    def test_nested_fallback_resolves(self):
        entry = _entry(".x { color: var(--brand, rgb(0, 0, 0)); }", "x")
        assert entry.base["color"] == "rgb(0, 0, 0)"

    def test_defined_variable_beats_nested_fallback(self):
        css = ":root { --brand: #0af; } .x { color: var(--brand, rgb(0, 0, 0)); }"
        assert _entry(css, "x").base["color"] == "#0af"

    def test_self_referencing_variable_warns(self):
        assert "variable_unresolved" in _kinds(":root { --a: var(--a); } .x { color: var(--a); }")

    def test_config_is_threaded(self):
        config = ConverterConfig(max_variable_depth=1)
        index = build_class_index(":root { --a: var(--b); --b: 1px; } .x { width: var(--a); }", config)
        assert index.get("x").base["width"] == "var(--b)"
