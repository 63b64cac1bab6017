"""Tests for amount parsing and formatting."""

from decimal import Decimal

import pytest

from tillersync.domain.amount import Amount, AmountFormat
from tillersync.domain.errors import ValidationError


@pytest.mark.parametrize(
    "text,value,dollar,commas",
    [
        ("-$1,234.56", Decimal("-1234.56"), True, True),
        ("$5.00", Decimal("5.00"), True, False),
        ("12.5", Decimal("12.5"), False, False),
        ("$-5.00", Decimal("-5.00"), True, False),
        ("  -4.50 ", Decimal("-4.50"), False, False),
        ("2,500", Decimal("2500"), False, True),
    ],
)
def test_parse(text, value, dollar, commas):
    """Test parsing the amount forms found in Tiller sheets."""
    amount = Amount.parse(text)
    assert amount.value == value
    assert amount.format == AmountFormat(dollar=dollar, commas=commas)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("-$1,234.56", "-$1,234.56"),
        ("$2,500.00", "$2,500.00"),
        ("$10.00", "$10.00"),
        ("$-5.00", "-$5.00"),
        ("12.5", "12.5"),
        ("$1,000", "$1,000.00"),
    ],
)
def test_str_uses_parsed_format(text, expected):
    """Test that an amount is shown the way it was read."""
    assert str(Amount.parse(text)) == expected


def test_empty_amount():
    """Test that an empty cell is the default zero amount."""
    amount = Amount.parse("   ")
    assert amount == Amount()
    assert amount.is_zero()
    assert str(amount) == "$0.00"
    assert amount.to_text() == ""


def test_to_text_of_real_amount():
    """Test that a non-default amount is stored as its display text."""
    assert Amount.parse("$0.00").to_text() == "$0.00"
    assert Amount.parse("-$6.75").to_text() == "-$6.75"


@pytest.mark.parametrize("text", ["abc", "--5", "$+5", "$", "-", "NaN", "Infinity", "1.2.3"])
def test_parse_invalid(text):
    """Test that malformed amounts are rejected."""
    with pytest.raises(ValidationError, match="Invalid amount"):
        Amount.parse(text)


def test_parse_optional():
    """Test that an empty optional amount is None."""
    assert Amount.parse_optional("") is None
    assert Amount.parse_optional(" ") is None
    assert Amount.parse_optional("$10.00").value == Decimal("10.00")


def test_sign_predicates():
    """Test sign checks."""
    assert Amount.parse("-$1.00").is_negative()
    assert Amount.parse("$1.00").is_positive()
    assert not Amount.parse("0").is_positive()
    assert Amount.parse("0").is_zero()


def test_same_value_different_format_not_equal():
    """Test that equality includes the format."""
    assert Amount.parse("$5.00") != Amount.parse("5.00")
    assert Amount.parse("$5.00").value == Amount.parse("5.00").value
