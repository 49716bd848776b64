"""Persistence boundary for the delivery validator.

All loads are eager: an order comes back with its lines, a delivery with
its lines, its linked order and that order's lines, so nothing is fetched
lazily while discrepancies are being computed.  The store never commits;
the validator owns the transaction.
"""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import DeliveryNotFoundError, OrderNotFoundError
from app.models.delivery import Delivery
from app.models.discrepancy import Discrepancy
from app.models.enums import DiscrepancyStatus
from app.models.order import PurchaseOrder
from app.services.reconciliation.detector import DetectedDiscrepancy


class DiscrepancyStore:
    """Loads reconciliation aggregates and appends discrepancy rows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def load_order(self, order_id: uuid.UUID) -> PurchaseOrder:
        order = (
            self.db.query(PurchaseOrder)
            .options(selectinload(PurchaseOrder.lines))
            .filter(PurchaseOrder.id == order_id)
            .populate_existing()
            .first()
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def load_delivery(
        self,
        delivery_id: uuid.UUID,
        for_update: bool = False,
    ) -> Delivery:
        """Load a delivery with its lines and its order's lines.

        ``populate_existing`` refreshes rows already in the identity map so
        a validation committed by another session is always visible.
        ``for_update`` locks the delivery row until the transaction ends on
        backends that support ``SELECT ... FOR UPDATE``.
        """
        query = (
            self.db.query(Delivery)
            .options(
                selectinload(Delivery.lines),
                selectinload(Delivery.order).selectinload(PurchaseOrder.lines),
            )
            .filter(Delivery.id == delivery_id)
            .populate_existing()
        )
        if for_update:
            query = query.with_for_update()

        delivery = query.first()
        if delivery is None:
            raise DeliveryNotFoundError(delivery_id)
        return delivery

    def insert_discrepancy(self, detected: DetectedDiscrepancy) -> Discrepancy:
        row = Discrepancy(
            id=uuid.uuid4(),
            flight_id=detected.flight_id,
            article_id=detected.article_id,
            order_id=detected.order_id,
            delivery_id=detected.delivery_id,
            kind=detected.kind.value,
            status=DiscrepancyStatus.PENDING.value,
            ordered_quantity=detected.ordered_quantity,
            delivered_quantity=detected.delivered_quantity,
            quantity_delta=detected.quantity_delta,
            ordered_unit_price=detected.ordered_unit_price,
            delivered_unit_price=detected.delivered_unit_price,
            amount_delta=detected.amount_delta,
            description=detected.description,
            detected_at=detected.detected_at,
        )
        self.db.add(row)
        return row

    def save_delivery(self, delivery: Delivery) -> None:
        """Stage the delivery's changes; a concurrent update raises StaleDataError."""
        self.db.add(delivery)
        self.db.flush()
