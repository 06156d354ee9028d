from fractions import Fraction

import pytest

from ini_guard.coercion import (
    CoercerProtocol,
    coerce,
    coerce_list,
    has_coercer,
    register_coercer,
    unregister_coercer,
)
from ini_guard.exceptions import CoercionError


@pytest.fixture
def fraction_coercer():
    register_coercer(Fraction, Fraction)
    yield
    unregister_coercer(Fraction)


@pytest.mark.parametrize("text", ["true", "True", "1", "yes", "YES", "on", "  yes  "])
def test_bool_true_words(text):
    assert coerce(text, bool) is True


@pytest.mark.parametrize("text", ["false", "0", "no", "Off", "FALSE"])
def test_bool_false_words(text):
    assert coerce(text, bool) is False


@pytest.mark.parametrize("text", ["maybe", "", "2", "y"])
def test_bool_rejects(text):
    with pytest.raises(CoercionError):
        coerce(text, bool)


def test_int_grammar():
    assert coerce("42", int) == 42
    assert coerce(" -7 ", int) == -7
    assert coerce("+3", int) == 3
    for bad in ("1_000", "0x10", "1.0", "", "\u0663"):
        with pytest.raises(CoercionError) as info:
            coerce(bad, int)
        assert info.value.text == bad


def test_float_grammar():
    assert coerce("1.5", float) == 1.5
    assert coerce("-.5", float) == -0.5
    assert coerce("3.", float) == 3.0
    assert coerce("1e3", float) == 1000.0
    assert coerce("inf", float) == float("inf")
    assert coerce("-Infinity", float) == float("-inf")
    assert coerce("NaN", float) != coerce("NaN", float)
    for bad in ("1,5", "abc", "", "1_0.0", "e5"):
        with pytest.raises(CoercionError):
            coerce(bad, float)


def test_str_is_identity():
    assert coerce("  keep  ", str) == "  keep  "


def test_list_splitting():
    assert coerce("a, b ,c", list) == ["a", "b", "c"]
    assert coerce("a;b", list, ";") == ["a", "b"]
    assert coerce("   ", list) == []
    assert coerce("a,,b", list) == ["a", "", "b"]
    assert coerce_list("1, 2", ",", int) == [1, 2]


def test_coercion_error_message():
    err = CoercionError("maybe", bool)
    assert "maybe" in str(err)
    assert "bool" in str(err)
    assert isinstance(err, ValueError)


def test_unknown_type_raises_type_error():
    assert has_coercer(complex) is False
    with pytest.raises(TypeError):
        coerce("1j", complex)


def test_register_custom_coercer(fraction_coercer):
    assert has_coercer(Fraction)
    assert coerce("3/4", Fraction) == Fraction(3, 4)
    with pytest.raises(CoercionError):
        coerce("three quarters", Fraction)
    with pytest.raises(ValueError):
        register_coercer(Fraction, Fraction)
    register_coercer(Fraction, lambda text: Fraction(text.strip()), override=True)
    assert coerce(" 1/2 ", Fraction) == Fraction(1, 2)


def test_builtin_coercers_cannot_be_replaced():
    with pytest.raises(ValueError):
        register_coercer(int, int)
    with pytest.raises(ValueError):
        register_coercer(list, list)
    with pytest.raises(ValueError):
        unregister_coercer(bool)


def test_register_non_callable():
    assert not isinstance(123, CoercerProtocol)
    with pytest.raises(TypeError):
        register_coercer(Fraction, 123)  # type: ignore[arg-type]


def test_coercion_failure_log_omits_text(caplog):
    caplog.set_level("DEBUG", logger="ini_guard.coercion")
    with pytest.raises(CoercionError):
        coerce("hunter2", int)
    assert caplog.records
    assert not any("hunter2" in r.getMessage() for r in caplog.records)
