"""Tests for shorthand expansion and functional-value rewriting."""

import pytest

from flowbridge.normalize.shorthand import (
    box_values,
    expand_border,
    expand_flex,
    expand_grid_placement,
    expand_shorthand,
)
from flowbridge.normalize.values import rewrite_functional_values


# ---------------------------------------------------------------------------
# Box shorthands
# ---------------------------------------------------------------------------


class TestBoxShorthands:
    def test_single_value(self):
        assert expand_shorthand("padding", "10px") == {
            "padding-top": "10px",
            "padding-right": "10px",
            "padding-bottom": "10px",
            "padding-left": "10px",
        }

    def test_four_values_positional(self):
        assert expand_shorthand("padding", "1px 2px 3px 4px") == {
            "padding-top": "1px",
            "padding-right": "2px",
            "padding-bottom": "3px",
            "padding-left": "4px",
        }

    def test_two_and_three_values(self):
        assert box_values("1px 2px") == ["1px", "2px", "1px", "2px"]
        assert box_values("1px 2px 3px") == ["1px", "2px", "3px", "2px"]

    def test_parenthesized_values_not_split(self):
        assert box_values("calc(1px + 2px) 0") == ["calc(1px + 2px)", "0", "calc(1px + 2px)", "0"]

    def test_more_than_four_repeats_raw(self):
        assert box_values("1px 2px 3px 4px 5px") == ["1px 2px 3px 4px 5px"] * 4

    def test_border_radius(self):
        result = expand_shorthand("border-radius", "4px 8px")
        assert result["border-top-left-radius"] == "4px"
        assert result["border-top-right-radius"] == "8px"

    def test_gap_defaults_column_to_row(self):
        assert expand_shorthand("gap", "20px") == {"row-gap": "20px", "column-gap": "20px"}
        assert expand_shorthand("gap", "10px 20px") == {"row-gap": "10px", "column-gap": "20px"}


# ---------------------------------------------------------------------------
# flex / border / placement
# ---------------------------------------------------------------------------


class TestExpandFlex:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("none", ("0", "0", "auto")),
            ("auto", ("1", "1", "auto")),
            ("initial", ("0", "1", "auto")),
            ("2", ("2", "1", "0%")),
            ("2 3", ("2", "3", "0%")),
            ("1 200px", ("1", "1", "200px")),
            ("1 0 auto", ("1", "0", "auto")),
        ],
    )
    def test_forms(self, value, expected):
        result = expand_flex(value)
        assert (result["flex-grow"], result["flex-shrink"], result["flex-basis"]) == expected

    def test_unparseable_is_empty(self):
        assert expand_flex("content") == {}
        assert expand_flex("") == {}


class TestExpandBorder:
    def test_full(self):
        assert expand_border("1px solid #000") == {
            "border-width": "1px",
            "border-style": "solid",
            "border-color": "#000",
        }

    def test_any_order(self):
        result = expand_border("red dashed thick")
        assert result == {"border-width": "thick", "border-style": "dashed", "border-color": "red"}

    def test_missing_parts_default(self):
        assert expand_border("solid") == {
            "border-width": "medium",
            "border-style": "solid",
            "border-color": "currentColor",
        }

    @pytest.mark.parametrize("value", ["none", "0", ""])
    def test_none(self, value):
        assert expand_border(value) == {
            "border-width": "0",
            "border-style": "none",
            "border-color": "transparent",
        }


class TestGridPlacement:
    def test_span(self):
        assert expand_grid_placement("span 2") == ("auto", "span 2")

    def test_slash(self):
        assert expand_grid_placement("1 / -1") == ("1", "-1")

    def test_integer(self):
        assert expand_grid_placement("3") == ("3", "auto")

    def test_other_passes_through(self):
        assert expand_grid_placement("header-start") is None


# ---------------------------------------------------------------------------
# Functional values
# ---------------------------------------------------------------------------


class TestFunctionalValues:
    def test_clamp_takes_max(self):
        assert rewrite_functional_values("clamp(1rem, 2vw, 3rem)") == "3rem"

    def test_min_and_max_take_first(self):
        assert rewrite_functional_values("min(100%, 600px)") == "100%"
        assert rewrite_functional_values("max(10px, 1em)") == "10px"

    def test_nested(self):
        assert rewrite_functional_values("clamp(1px, 2px, min(3px, 4px))") == "3px"

    def test_minmax_untouched(self):
        value = "repeat(3, minmax(0, 1fr))"
        assert rewrite_functional_values(value) == value

    def test_embedded_in_larger_value(self):
        assert rewrite_functional_values("0 clamp(1px, 2px, 3px) 4px") == "0 3px 4px"
