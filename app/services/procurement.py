"""Creation of purchase orders and deliveries.

Lines are attached at creation time, line amounts are computed as
quantity x unit price, and totals as the sum of line amounts.  Every
referenced flight, order and article must already exist.
"""

from __future__ import annotations

import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    ArticleNotFoundError,
    FlightNotFoundError,
    OrderNotFoundError,
)
from app.core.logging import get_logger
from app.models.delivery import Delivery, DeliveryLine
from app.models.order import OrderLine, PurchaseOrder
from app.models.reference import Article, Flight
from app.schemas.delivery import DeliveryCreate
from app.schemas.order import OrderCreate

logger = get_logger(__name__)

CENT = Decimal("0.01")


def line_amount(quantity: int, unit_price: Decimal) -> Decimal:
    """quantity x unit price, rounded to cents."""
    return (Decimal(quantity) * Decimal(unit_price)).quantize(CENT, rounding=ROUND_HALF_UP)


def create_order(db: Session, payload: OrderCreate) -> PurchaseOrder:
    """Persist a purchase order and its lines, then commit."""
    _require_flight(db, payload.flight_id)
    _require_articles(db, (line.article_id for line in payload.lines))

    order = PurchaseOrder(
        id=uuid.uuid4(),
        number=payload.number,
        flight_id=payload.flight_id,
        order_date=payload.order_date,
        supplier=payload.supplier,
        status=payload.status.value,
        comments=payload.comments,
        created_by=payload.created_by,
    )
    for position, item in enumerate(payload.lines):
        order.lines.append(
            OrderLine(
                position=position,
                article_id=item.article_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_amount=line_amount(item.quantity, item.unit_price),
                comments=item.comments,
            )
        )
    order.total_amount = sum((line.line_amount for line in order.lines), Decimal("0"))

    db.add(order)
    db.commit()
    logger.info(
        "Order created: number=%s lines=%d total=%s",
        order.number,
        len(payload.lines),
        order.total_amount,
    )
    return order


def create_delivery(db: Session, payload: DeliveryCreate) -> Delivery:
    """Persist a delivery and its lines, then commit."""
    if payload.flight_id is not None:
        _require_flight(db, payload.flight_id)
    if payload.order_id is not None and db.get(PurchaseOrder, payload.order_id) is None:
        raise OrderNotFoundError(payload.order_id)
    _require_articles(
        db, (line.article_id for line in payload.lines if line.article_id is not None)
    )

    delivery = Delivery(
        id=uuid.uuid4(),
        number=payload.number,
        flight_id=payload.flight_id,
        order_id=payload.order_id,
        delivery_date=payload.delivery_date,
        supplier=payload.supplier,
        carrier=payload.carrier,
        status=payload.status,
        comments=payload.comments,
    )
    for position, item in enumerate(payload.lines):
        delivery.lines.append(
            DeliveryLine(
                position=position,
                article_id=item.article_id,
                article_name=item.article_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_amount=line_amount(item.quantity, item.unit_price),
                comments=item.comments,
            )
        )
    delivery.total_amount = sum(
        (line.line_amount for line in delivery.lines), Decimal("0")
    )

    db.add(delivery)
    db.commit()
    logger.info(
        "Delivery created: number=%s order=%s lines=%d total=%s",
        delivery.number,
        delivery.order_id,
        len(payload.lines),
        delivery.total_amount,
    )
    return delivery


def _require_flight(db: Session, flight_id: Optional[uuid.UUID]) -> None:
    if db.get(Flight, flight_id) is None:
        raise FlightNotFoundError(flight_id)


def _require_articles(db: Session, article_ids: Iterable[uuid.UUID]) -> None:
    wanted = set(article_ids)
    if not wanted:
        return
    found = {
        row[0] for row in db.query(Article.id).filter(Article.id.in_(wanted)).all()
    }
    missing = sorted(wanted - found, key=str)
    if missing:
        raise ArticleNotFoundError(missing[0])
