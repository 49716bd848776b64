"""Immutable value copies of orders and deliveries.

The detector never touches ORM objects: the validator snapshots the
eagerly loaded rows first, so detection works on plain frozen values and
keeps no reference back into the session.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class LineSnapshot:
    """One order or delivery line, frozen at validation time."""

    article_id: Optional[uuid.UUID]
    quantity: int
    unit_price: Decimal
    line_amount: Decimal
    article_name: Optional[str] = None

    @classmethod
    def from_line(cls, line: Any) -> LineSnapshot:
        return cls(
            article_id=line.article_id,
            quantity=int(line.quantity),
            unit_price=Decimal(line.unit_price or 0),
            line_amount=Decimal(line.line_amount or 0),
            article_name=getattr(line, "article_name", None),
        )


@dataclass(frozen=True)
class OrderSnapshot:
    id: uuid.UUID
    number: str
    flight_id: uuid.UUID
    lines: tuple[LineSnapshot, ...]

    @classmethod
    def from_model(cls, order: Any) -> OrderSnapshot:
        return cls(
            id=order.id,
            number=order.number,
            flight_id=order.flight_id,
            lines=_snapshot_lines(order.lines),
        )


@dataclass(frozen=True)
class DeliverySnapshot:
    id: uuid.UUID
    number: str
    flight_id: Optional[uuid.UUID]
    order: Optional[OrderSnapshot]
    lines: tuple[LineSnapshot, ...]

    @classmethod
    def from_model(cls, delivery: Any) -> DeliverySnapshot:
        order = delivery.order
        return cls(
            id=delivery.id,
            number=delivery.number,
            flight_id=delivery.flight_id,
            order=OrderSnapshot.from_model(order) if order is not None else None,
            lines=_snapshot_lines(delivery.lines),
        )

    @property
    def flight_ref(self) -> Optional[uuid.UUID]:
        """Flight a discrepancy is booked against; the order's when the delivery has none."""
        if self.flight_id is not None:
            return self.flight_id
        return self.order.flight_id if self.order is not None else None


def _snapshot_lines(lines: Iterable[Any]) -> tuple[LineSnapshot, ...]:
    return tuple(LineSnapshot.from_line(line) for line in lines)
