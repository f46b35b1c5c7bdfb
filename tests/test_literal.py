"""Tests for the Literal value builder."""

import pytest

from timecalc.literal import MAX_FRACTION_DIGITS, TOGGLE_SIGN, TOGGLE_TYPE, Literal
from timecalc.models import Phase, ValueType


def typed(keys):
    literal = Literal()
    for ch in keys:
        literal.input_character(ch)
    return literal


def snapshot(literal):
    return (
        literal.render(),
        literal.sign,
        literal.type,
        literal.phase,
        list(literal.whole_digits),
        list(literal.fraction_digits),
    )


# --- Rendering ---

def test_empty_renders_zero_seconds():
    literal = Literal()
    assert literal.render() == "0s"
    assert literal.is_empty()


def test_time_grouping_engages_at_three_digits():
    literal = Literal()
    assert literal.input_character("1") == "1s"
    assert literal.input_character("2") == "12s"
    assert literal.input_character("3") == "01:23"


@pytest.mark.parametrize(
    "keys, expected",
    [
        ("9", "9s"),
        ("98", "98s"),
        ("987", "09:87"),
        ("9876", "98:76"),
        ("98765", "9:87:65"),
        ("987654", "98:76:54"),
        ("9876543", "987:65:43"),
        ("9876543210", "987654:32:10"),
        ("102030.405", "10:20:30.405"),
        ("123.", "01:23.0"),
        (".", "0.0s"),
        (".024", "0.024s"),
    ],
)
def test_time_rendering(keys, expected):
    assert typed(keys).render() == expected


@pytest.mark.parametrize(
    "keys, expected",
    [
        ("#", "0"),
        ("12345#", "12345"),
        ("#55.5", "55.5"),
        ("#.", "0.0"),
    ],
)
def test_number_rendering(keys, expected):
    assert typed(keys).render() == expected


def test_leading_zeros_suppressed():
    literal = typed("000")
    assert literal.whole_digits == ["0"]
    assert not literal.is_empty()
    assert literal.render() == "0s"
    assert literal.input_character("7") == "7s"
    assert literal.input_character("0") == "70s"


def test_fraction_capped_at_nine_digits():
    literal = typed("1." + "1" * 12)
    assert len(literal.fraction_digits) == MAX_FRACTION_DIGITS
    assert literal.render() == "1.111111111s"


def test_repeated_decimal_point_ignored():
    literal = typed("12.3")
    assert literal.input_character(".") == "12.3s"
    assert literal.phase is Phase.FRACTION


def test_negative_prefix():
    assert typed("123" + TOGGLE_SIGN).render() == "-01:23"
    assert typed("5#~").render() == "-5"


def test_unknown_characters_ignored():
    literal = typed("12")
    for ch in "a+x:()":
        assert literal.input_character(ch) == "12s"


# --- Toggles ---

@pytest.mark.parametrize("keys", ["", "7", "123", "1234567.89", ".", "#5", "~42"])
@pytest.mark.parametrize("toggle", [TOGGLE_TYPE, TOGGLE_SIGN])
def test_toggle_twice_restores_state(keys, toggle):
    literal = typed(keys)
    before = snapshot(literal)
    literal.input_character(toggle)
    assert snapshot(literal) != before
    literal.input_character(toggle)
    assert snapshot(literal) == before


def test_toggle_type_keeps_digits():
    literal = typed("1234.5")
    literal.toggle_type()
    assert literal.type is ValueType.NUMBER
    assert literal.whole_digits == list("1234")
    assert literal.fraction_digits == ["5"]


def test_toggle_aliases():
    assert typed("5n").type is ValueType.NUMBER
    assert typed("5N").type is ValueType.NUMBER


# --- Deletion ---

def test_delete_walks_back_through_fraction_point_and_digits():
    literal = typed("123.45")
    expected = ["01:23.4", "01:23.0", "01:23", "12s", "1s", "0s", "0s"]
    for rendering in expected:
        literal.delete_last_character()
        assert literal.render() == rendering
    assert literal.is_empty()


def test_delete_undoes_decimal_point():
    literal = typed(".")
    assert not literal.is_empty()
    literal.delete_last_character()
    assert literal.phase is Phase.WHOLE
    assert literal.is_empty()


def test_sign_and_type_are_not_content():
    literal = typed("#~")
    assert literal.is_empty()
    assert literal.render() == "-0"


def test_reset():
    literal = typed("12.5#~")
    literal.reset()
    assert literal.render() == "0s"
    assert literal.is_empty()
    assert literal.type is ValueType.TIME


def test_delete_after_lone_zero_returns_to_zero():
    literal = typed("05")
    assert literal.render() == "5s"
    literal.delete_last_character()
    assert literal.render() == "0s"
    assert not literal.is_empty()
    literal.delete_last_character()
    assert literal.is_empty()
