"""Unit tests for the discrepancy detector.

All tests are *pure*: no database, no I/O.  Results are compared as sets
keyed by (article_id, kind); the sequence order is only for display.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

import pytest

from app.models.enums import DiscrepancyKind
from app.services.reconciliation.detector import classify_pair, detect
from app.services.reconciliation.index import build_line_index
from app.services.reconciliation.snapshots import LineSnapshot

FLIGHT = uuid.uuid4()
ORDER = uuid.uuid4()
DELIVERY = uuid.uuid4()
DETECTED_AT = datetime(2025, 3, 14, 9, 30)

WATER = uuid.uuid4()
BREAD = uuid.uuid4()
CHEESE = uuid.uuid4()
JUICE = uuid.uuid4()


# ── Helpers ──────────────────────────────────────────────────────────


def _line(article_id, qty: int, price: str) -> LineSnapshot:
    unit_price = Decimal(price)
    return LineSnapshot(
        article_id=article_id,
        quantity=qty,
        unit_price=unit_price,
        line_amount=(unit_price * qty).quantize(Decimal("0.01")),
    )


def _detect(order_lines, delivery_lines, **kwargs):
    return detect(
        build_line_index(order_lines),
        build_line_index(delivery_lines, source="delivery"),
        FLIGHT,
        ORDER,
        DELIVERY,
        detected_at=kwargs.pop("detected_at", DETECTED_AT),
        **kwargs,
    )


def _by_key(records) -> dict:
    return {r.identity_key: r for r in records}


# ── Scenarios ────────────────────────────────────────────────────────


class TestDetectScenarios:
    def test_over_missing_and_extra(self) -> None:
        """Order [Water 10@1, Bread 5@2] vs delivery [Water 12@1, Cheese 3@3]."""
        result = _by_key(
            _detect(
                [_line(WATER, 10, "1.00"), _line(BREAD, 5, "2.00")],
                [_line(WATER, 12, "1.00"), _line(CHEESE, 3, "3.00")],
            )
        )

        assert set(result) == {
            (WATER, DiscrepancyKind.QUANTITY_OVER),
            (BREAD, DiscrepancyKind.ARTICLE_MISSING),
            (CHEESE, DiscrepancyKind.ARTICLE_EXTRA),
        }

        water = result[(WATER, DiscrepancyKind.QUANTITY_OVER)]
        assert water.ordered_quantity == 10
        assert water.delivered_quantity == 12
        assert water.quantity_delta == 2
        assert water.amount_delta == Decimal("2.00")

        bread = result[(BREAD, DiscrepancyKind.ARTICLE_MISSING)]
        assert bread.delivered_quantity == 0
        assert bread.delivered_unit_price == Decimal("0")
        assert bread.quantity_delta == -5
        assert bread.amount_delta == Decimal("-10.00")

        cheese = result[(CHEESE, DiscrepancyKind.ARTICLE_EXTRA)]
        assert cheese.ordered_quantity == 0
        assert cheese.ordered_unit_price == Decimal("0")
        assert cheese.quantity_delta == 3
        assert cheese.amount_delta == Decimal("9.00")

    def test_identical_lines_produce_nothing(self) -> None:
        assert _detect([_line(JUICE, 4, "1.50")], [_line(JUICE, 4, "1.50")]) == ()

    def test_records_carry_references(self) -> None:
        (record,) = _detect([_line(BREAD, 5, "2.00")], [], delivery_number="DN-0042")

        assert record.flight_id == FLIGHT
        assert record.order_id == ORDER
        assert record.delivery_id == DELIVERY
        assert record.detected_at == DETECTED_AT
        assert "DN-0042" in record.description

    def test_sequence_is_order_pass_then_delivery_pass(self) -> None:
        result = _detect(
            [_line(BREAD, 5, "2.00"), _line(WATER, 10, "1.00")],
            [_line(CHEESE, 3, "3.00"), _line(JUICE, 1, "1.00"), _line(WATER, 9, "1.00")],
        )

        assert [(r.article_id, r.kind) for r in result] == [
            (BREAD, DiscrepancyKind.ARTICLE_MISSING),
            (WATER, DiscrepancyKind.QUANTITY_UNDER),
            (CHEESE, DiscrepancyKind.ARTICLE_EXTRA),
            (JUICE, DiscrepancyKind.ARTICLE_EXTRA),
        ]

    def test_empty_indices(self) -> None:
        assert _detect([], []) == ()


# ── Properties ───────────────────────────────────────────────────────


class TestDetectProperties:
    def test_disjoint_articles_are_all_missing_or_extra(self) -> None:
        order = [_line(WATER, 10, "1.00"), _line(BREAD, 5, "2.00")]
        delivery = [_line(CHEESE, 3, "3.00"), _line(JUICE, 7, "0.80")]

        result = _detect(order, delivery)

        kinds = [r.kind for r in result]
        assert kinds.count(DiscrepancyKind.ARTICLE_MISSING) == len(order)
        assert kinds.count(DiscrepancyKind.ARTICLE_EXTRA) == len(delivery)
        assert len(result) == len(order) + len(delivery)

    @pytest.mark.parametrize(
        "qty, ordered_price, delivered_price",
        [
            (4, "1.50", "1.50"),
            (1, "2.00", "2.01"),
            (1, "2.01", "2.00"),
            (0, "5.00", "9.00"),
            (100, "0.10", "0.10"),
        ],
    )
    def test_equal_quantity_within_tolerance_is_silent(
        self, qty, ordered_price, delivered_price
    ) -> None:
        result = _detect(
            [_line(WATER, qty, ordered_price)],
            [_line(WATER, qty, delivered_price)],
        )

        assert result == ()

    @pytest.mark.parametrize(
        "ordered_qty, delivered_qty, expected_kind",
        [
            (10, 11, DiscrepancyKind.QUANTITY_OVER),
            (10, 9, DiscrepancyKind.QUANTITY_UNDER),
            (0, 3, DiscrepancyKind.QUANTITY_OVER),
            (3, 0, DiscrepancyKind.QUANTITY_UNDER),
            (1, 1000, DiscrepancyKind.QUANTITY_OVER),
        ],
    )
    def test_quantity_difference_yields_one_quantity_record(
        self, ordered_qty, delivered_qty, expected_kind
    ) -> None:
        result = _detect(
            [_line(WATER, ordered_qty, "1.25")],
            [_line(WATER, delivered_qty, "1.25")],
        )

        assert len(result) == 1
        assert result[0].kind == expected_kind
        assert result[0].quantity_delta == delivered_qty - ordered_qty

    def test_quantity_kind_wins_even_when_price_also_differs(self) -> None:
        (record,) = _detect([_line(WATER, 10, "1.00")], [_line(WATER, 8, "2.00")])

        assert record.kind == DiscrepancyKind.QUANTITY_UNDER
        assert record.amount_delta == Decimal("6.00")

    def test_price_change_with_same_quantity_is_price_mismatch(self) -> None:
        (record,) = _detect([_line(WATER, 10, "1.00")], [_line(WATER, 10, "1.20")])

        assert record.kind == DiscrepancyKind.PRICE_MISMATCH
        assert record.quantity_delta == 0
        assert record.ordered_unit_price == Decimal("1.00")
        assert record.delivered_unit_price == Decimal("1.20")
        assert record.amount_delta == Decimal("2.00")

    def test_detection_is_repeatable(self) -> None:
        order = [_line(WATER, 10, "1.00"), _line(BREAD, 5, "2.00")]
        delivery = [_line(WATER, 12, "1.00"), _line(CHEESE, 3, "3.00")]

        first = _detect(order, delivery, detected_at=datetime(2025, 1, 1))
        second = _detect(order, delivery, detected_at=datetime(2025, 6, 1))

        def strip(records):
            return {
                (r.identity_key, r.quantity_delta, r.amount_delta, r.description)
                for r in records
            }

        assert strip(first) == strip(second)

    def test_custom_tolerance(self) -> None:
        result = _detect(
            [_line(WATER, 10, "1.00")],
            [_line(WATER, 10, "1.04")],
            tolerance=Decimal("0.50"),
        )

        assert result == ()


class TestClassifyPair:
    def test_boundary_is_inclusive(self) -> None:
        ordered = _line(WATER, 1, "1.00")
        delivered = _line(WATER, 1, "1.01")

        assert classify_pair(ordered, delivered) is None

    def test_just_over_boundary(self) -> None:
        ordered = _line(WATER, 1, "1.00")
        delivered = _line(WATER, 1, "1.02")

        assert classify_pair(ordered, delivered) == DiscrepancyKind.PRICE_MISMATCH
