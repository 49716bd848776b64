"""Order-versus-delivery discrepancy detection.

``detect`` compares an order line index with a delivery line index and
returns one ``DetectedDiscrepancy`` per mismatching article.  It is pure:
no session, no clock, no logging side effects beyond debug output.  The
same two indices always produce the same records; only ``detected_at``
comes from the caller.

Records are frozen dataclasses rather than ORM rows so the detector can
be unit-tested without a database; the store turns them into
``Discrepancy`` rows.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.core.logging import get_logger
from app.models.enums import DiscrepancyKind
from app.services.reconciliation.index import LineIndex
from app.services.reconciliation.snapshots import LineSnapshot

logger = get_logger(__name__)

# Amount differences at or below this are rounding noise.
DEFAULT_AMOUNT_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0")


@dataclass(frozen=True)
class DetectedDiscrepancy:
    """A discrepancy computed for one article, not yet persisted."""

    flight_id: uuid.UUID
    article_id: uuid.UUID
    order_id: Optional[uuid.UUID]
    delivery_id: Optional[uuid.UUID]
    kind: DiscrepancyKind
    ordered_quantity: int
    delivered_quantity: int
    quantity_delta: int
    ordered_unit_price: Decimal
    delivered_unit_price: Decimal
    amount_delta: Decimal
    description: str
    detected_at: datetime

    @property
    def identity_key(self) -> tuple[uuid.UUID, DiscrepancyKind]:
        return (self.article_id, self.kind)


# ── Classification ──────────────────────────────────────────────────


def classify_pair(
    ordered: LineSnapshot,
    delivered: LineSnapshot,
    tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
) -> Optional[DiscrepancyKind]:
    """Kind of discrepancy for an article on both sides, or None when they agree.

    Equal quantities with an amount gap beyond ``tolerance`` is a price
    mismatch, never a quantity discrepancy.
    """
    quantity_delta = delivered.quantity - ordered.quantity
    amount_delta = delivered.line_amount - ordered.line_amount

    if quantity_delta == 0 and abs(amount_delta) <= tolerance:
        return None
    if quantity_delta > 0:
        return DiscrepancyKind.QUANTITY_OVER
    if quantity_delta < 0:
        return DiscrepancyKind.QUANTITY_UNDER
    return DiscrepancyKind.PRICE_MISMATCH


# ── Detection ───────────────────────────────────────────────────────


def detect(
    order_index: LineIndex,
    delivery_index: LineIndex,
    flight_id: uuid.UUID,
    order_id: Optional[uuid.UUID],
    delivery_id: Optional[uuid.UUID],
    *,
    detected_at: datetime,
    tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
    delivery_number: Optional[str] = None,
) -> tuple[DetectedDiscrepancy, ...]:
    """Compute every discrepancy between an order and a delivery.

    Two passes:
      1. Each ordered article, in order-line sequence: compare with the
         delivered line, or report it missing.
      2. Each delivered article the order does not list, in delivery-line
         sequence: report it as extra.

    Args:
        order_index: Order lines keyed by article id.
        delivery_index: Delivery lines keyed by article id.
        flight_id: Flight the records are booked against.
        order_id: Back-reference stored on every record.
        delivery_id: Back-reference stored on every record.
        detected_at: Timestamp stamped on every record.
        tolerance: Largest amount difference treated as equal.
        delivery_number: Human-readable delivery number for descriptions.

    Returns:
        Discrepancies in detection order.  Callers comparing results
        should key them by ``identity_key``.
    """
    label = delivery_number or str(delivery_id)
    common = dict(
        flight_id=flight_id,
        order_id=order_id,
        delivery_id=delivery_id,
        detected_at=detected_at,
    )
    found: list[DetectedDiscrepancy] = []

    # Pass 1: ordered articles
    for article_id, ordered in order_index.items():
        delivered = delivery_index.get(article_id)

        if delivered is None:
            found.append(
                DetectedDiscrepancy(
                    article_id=article_id,
                    kind=DiscrepancyKind.ARTICLE_MISSING,
                    ordered_quantity=ordered.quantity,
                    delivered_quantity=0,
                    quantity_delta=-ordered.quantity,
                    ordered_unit_price=ordered.unit_price,
                    delivered_unit_price=ZERO,
                    amount_delta=-ordered.line_amount,
                    description=f"Article ordered but not delivered - delivery {label}",
                    **common,
                )
            )
            continue

        kind = classify_pair(ordered, delivered, tolerance)
        if kind is None:
            continue

        found.append(
            DetectedDiscrepancy(
                article_id=article_id,
                kind=kind,
                ordered_quantity=ordered.quantity,
                delivered_quantity=delivered.quantity,
                quantity_delta=delivered.quantity - ordered.quantity,
                ordered_unit_price=ordered.unit_price,
                delivered_unit_price=delivered.unit_price,
                amount_delta=delivered.line_amount - ordered.line_amount,
                description=(
                    f"Discrepancy detected while validating delivery {label}"
                ),
                **common,
            )
        )

    # Pass 2: delivered articles nobody ordered
    for article_id, delivered in delivery_index.items():
        if article_id in order_index:
            continue

        found.append(
            DetectedDiscrepancy(
                article_id=article_id,
                kind=DiscrepancyKind.ARTICLE_EXTRA,
                ordered_quantity=0,
                delivered_quantity=delivered.quantity,
                quantity_delta=delivered.quantity,
                ordered_unit_price=ZERO,
                delivered_unit_price=delivered.unit_price,
                amount_delta=delivered.line_amount,
                description=f"Article delivered but not ordered - delivery {label}",
                **common,
            )
        )

    logger.debug(
        "Detection complete: ordered=%d delivered=%d discrepancies=%d",
        len(order_index),
        len(delivery_index),
        len(found),
    )
    return tuple(found)
