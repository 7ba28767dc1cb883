"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from printstock.domain.exceptions import InvalidQuantityError, ValidationError
from printstock.domain.model.value_objects import Quantity, to_decimal


# ── to_decimal ───────────────────────────────────────────────────────────────


class TestToDecimal:

    def test_from_string(self):
        assert to_decimal("12.5") == Decimal("12.5")

    def test_from_int(self):
        assert to_decimal(7) == Decimal("7")

    def test_strips_whitespace(self):
        assert to_decimal("  3 ") == Decimal("3")

    def test_float_rejected(self):
        with pytest.raises(InvalidQuantityError, match="got float"):
            to_decimal(0.1)  # type: ignore[arg-type]

    def test_bool_rejected(self):
        with pytest.raises(InvalidQuantityError):
            to_decimal(True)  # type: ignore[arg-type]

    def test_garbage_rejected(self):
        with pytest.raises(InvalidQuantityError, match="Invalid quantity"):
            to_decimal("a lot")

    def test_infinity_rejected(self):
        with pytest.raises(InvalidQuantityError):
            to_decimal("Infinity")

    def test_nan_rejected(self):
        with pytest.raises(InvalidQuantityError):
            to_decimal("NaN")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        q = Quantity.of("250")
        assert q.value == Decimal("250")

    def test_fractional_quantity(self):
        assert Quantity.of("1.75").value == Decimal("1.75")

    def test_zero_rejected(self):
        with pytest.raises(InvalidQuantityError, match="must be positive"):
            Quantity.of(0)

    def test_negative_rejected(self):
        with pytest.raises(InvalidQuantityError, match="must be positive"):
            Quantity.of("-5")

    def test_non_decimal_rejected(self):
        with pytest.raises(InvalidQuantityError, match="must be a Decimal"):
            Quantity(5)  # type: ignore[arg-type]

    def test_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            Quantity.of("0")

    def test_addition(self):
        assert Quantity.of("2.5") + Quantity.of("0.5") == Quantity.of("3")

    def test_comparison(self):
        assert Quantity.of(1) < Quantity.of(2)
        assert Quantity.of(2) >= Quantity.of(2)

    def test_equality_by_value(self):
        assert Quantity.of("10") == Quantity(Decimal("10"))

    def test_immutable(self):
        q = Quantity.of(1)
        with pytest.raises(AttributeError):
            q.value = Decimal("2")  # type: ignore[misc]

    def test_str(self):
        assert str(Quantity.of("12.50")) == "12.50"
