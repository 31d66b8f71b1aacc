"""Unit tests for cent-exact money arithmetic"""

from decimal import Decimal
from src.domain import money


class TestRounding:
    """round_money rounds half away from zero to the cent"""

    def test_round_half_up(self):
        assert money.round_money(Decimal("2.675")) == Decimal("2.68")
        assert money.round_money(Decimal("2.674")) == Decimal("2.67")

    def test_rounding_is_symmetric_for_negative_amounts(self):
        assert money.round_money(Decimal("-2.675")) == Decimal("-2.68")
        assert money.round_money(Decimal("-0.005")) == -money.round_money(Decimal("0.005"))

    def test_float_inputs_do_not_carry_binary_noise(self):
        assert money.to_decimal(0.1) == Decimal("0.1")
        assert money.round_money(1.005) == Decimal("1.01")


class TestOperations:
    """add / sub / mul / div / percent_of"""

    def test_add_floats_is_exact(self):
        assert money.add(0.1, 0.2) == Decimal("0.30")

    def test_repeated_addition_does_not_drift(self):
        # Arrange
        total = money.ZERO

        # Act
        for _ in range(1000):
            total = money.add(total, 0.1)

        # Assert
        assert total == Decimal("100.00")

    def test_sub(self):
        assert money.sub(Decimal("395.00"), Decimal("14.00")) == Decimal("381.00")
        assert money.sub(0.3, 0.1) == Decimal("0.20")

    def test_mul_rounds_amount_but_keeps_factor_precision(self):
        assert money.mul(Decimal("19.99"), 3) == Decimal("59.97")
        assert money.mul(Decimal("10.00"), Decimal("0.333")) == Decimal("3.33")
        assert money.mul(Decimal("0.333"), 3) == Decimal("0.99")

    def test_div(self):
        assert money.div(10, 3) == Decimal("3.33")
        assert money.div(Decimal("-10"), 4) == Decimal("-2.50")

    def test_div_by_zero_yields_zero(self):
        assert money.div(Decimal("123.45"), 0) == money.ZERO

    def test_percent_of(self):
        assert money.percent_of(350, 4) == Decimal("14.00")
        assert money.percent_of(Decimal("300.00"), Decimal("15")) == Decimal("45.00")
        assert money.percent_of(Decimal("-350.00"), 4) == Decimal("-14.00")

    def test_results_are_cent_exact(self):
        for value in (
            money.add("1.111", "2.222"),
            money.mul("3.333", "1.5"),
            money.div("1", "7"),
            money.percent_of("99.99", "15"),
        ):
            assert money.is_cent_exact(value)
