"""Tests for the Result container and token helpers."""

import pytest

from timecalc.literal import Literal
from timecalc.models import Operator, Paren, Parenthesis, Result, Value, is_close, is_open


def test_success_holds_value_only():
    result = Result.success("4")
    assert result.is_success
    assert not result.is_failure
    assert result.value == "4"
    assert result.error is None


def test_failure_holds_error_only():
    result = Result.failure("div by zero")
    assert result.is_failure
    assert not result.is_success
    assert result.error == "div by zero"
    assert result.value is None


def test_empty_string_is_a_valid_success():
    result = Result.success("")
    assert result.is_success
    assert result.value == ""


def test_both_or_neither_payload_rejected():
    with pytest.raises(ValueError):
        Result()
    with pytest.raises(ValueError):
        Result(value="a", error="b")


def test_none_payload_rejected():
    with pytest.raises(ValueError):
        Result.success(None)
    with pytest.raises(ValueError):
        Result.failure(None)


def test_result_is_immutable():
    result = Result.success(1)
    with pytest.raises(AttributeError):
        result._value = 2


def test_unwrap():
    assert Result.success(3).unwrap() == 3
    with pytest.raises(ValueError, match="boom"):
        Result.failure("boom").unwrap()


def test_equality_and_repr():
    assert Result.success("x") == Result.success("x")
    assert Result.success("x") != Result.failure("x")
    assert repr(Result.success("x")) == "Success[x]"
    assert repr(Result.failure("y")) == "Failure[y]"


def test_token_text():
    value = Value(Literal())
    value.refresh()
    assert value.text == "0s"
    assert Operator("+").text == "+"
    assert Parenthesis(Paren.OPEN).text == "("
    assert is_open(Parenthesis(Paren.OPEN))
    assert is_close(Parenthesis(Paren.CLOSE))
    assert not is_open(None)
    assert not is_close(Operator("-"))
