"""Unit tests for the totals calculator"""

import random
from decimal import Decimal
from src.domain import money
from src.domain.document_line import LineItem
from src.domain.totals import calculate_totals


class TestTotalsScenarios:
    """Fixed scenarios"""

    def test_totals_without_retention(self, sample_items):
        """
        Given: 3 x 100 @ 15% and 1 x 50 @ 0%
        When: Totals are computed without retention
        Then: subtotal=350, tax=45, withholding=0, total=395
        """
        # Act
        totals = calculate_totals(sample_items, retention=False, withholding_rate=Decimal("4"))

        # Assert
        assert totals.subtotal == Decimal("350.00")
        assert totals.tax_total == Decimal("45.00")
        assert totals.withholding_total == Decimal("0.00")
        assert totals.total == Decimal("395.00")

    def test_totals_with_retention(self, sample_items):
        """
        Given: The same items
        When: Totals are computed with 4% retention
        Then: withholding=14 and total=381
        """
        # Act
        totals = calculate_totals(sample_items, retention=True, withholding_rate=Decimal("4"))

        # Assert
        assert totals.subtotal == Decimal("350.00")
        assert totals.tax_total == Decimal("45.00")
        assert totals.withholding_total == Decimal("14.00")
        assert totals.total == Decimal("381.00")

    def test_credit_note_totals_are_negated(self, sample_items):
        """Sign-reversed items give the exact negation, total <= 0"""
        # Act
        totals = calculate_totals([item.negated() for item in sample_items], True, Decimal("4"))

        # Assert
        assert totals.subtotal == Decimal("-350.00")
        assert totals.tax_total == Decimal("-45.00")
        assert totals.withholding_total == Decimal("-14.00")
        assert totals.total == Decimal("-381.00")
        assert totals.total <= 0

    def test_empty_document(self):
        totals = calculate_totals([], retention=True, withholding_rate=Decimal("4"))
        assert totals.total == money.ZERO

    def test_tax_is_rounded_per_line(self):
        """Three lines of 0.05 @ 15% each carry 0.01 of tax (0.0075 rounded up)"""
        # Arrange
        items = [
            LineItem(description=f"Item {i}", quantity=Decimal("1"), unit_price=Decimal("0.05"), tax_rate=Decimal("15"))
            for i in range(3)
        ]

        # Act
        totals = calculate_totals(items, retention=False, withholding_rate=Decimal("4"))

        # Assert
        assert totals.subtotal == Decimal("0.15")
        assert totals.tax_total == Decimal("0.03")

    def test_fractional_prices_do_not_accumulate_error(self):
        items = [
            LineItem(description="Bolt", quantity=Decimal("1"), unit_price=Decimal("0.10"))
            for _ in range(1000)
        ]
        assert calculate_totals(items, False, Decimal("4")).subtotal == Decimal("100.00")


class TestTotalsProperties:
    """Randomised checks of the totals identity"""

    def _random_items(self, rng):
        return [
            LineItem(
                description="Item",
                quantity=Decimal(rng.randint(1, 5000)) / Decimal(rng.choice([1, 10, 100, 1000])),
                unit_price=Decimal(rng.randint(0, 10_000_000)) / Decimal(100),
                tax_rate=Decimal(rng.choice([0, 8, 15, Decimal("12.5")])),
            )
            for _ in range(rng.randint(1, 12))
        ]

    def test_total_identity_and_cent_exactness(self):
        rng = random.Random(20240305)

        for _ in range(300):
            # Arrange
            items = self._random_items(rng)
            retention = rng.random() < 0.5

            # Act
            totals = calculate_totals(items, retention, Decimal("4"))

            # Assert
            assert totals.total == totals.subtotal + totals.tax_total - totals.withholding_total
            for value in (totals.subtotal, totals.tax_total, totals.withholding_total, totals.total):
                assert money.is_cent_exact(value)

    def test_recalculation_is_idempotent(self):
        rng = random.Random(7)

        for _ in range(50):
            items = self._random_items(rng)
            assert calculate_totals(items, True, Decimal("4")) == calculate_totals(items, True, Decimal("4"))

    def test_negated_items_negate_every_total(self):
        rng = random.Random(11)

        for _ in range(100):
            items = self._random_items(rng)
            retention = rng.random() < 0.5

            totals = calculate_totals(items, retention, Decimal("4"))
            reversed_totals = calculate_totals([i.negated() for i in items], retention, Decimal("4"))

            assert reversed_totals.subtotal == -totals.subtotal
            assert reversed_totals.tax_total == -totals.tax_total
            assert reversed_totals.withholding_total == -totals.withholding_total
            assert reversed_totals.total == -totals.total
