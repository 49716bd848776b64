"""Discrepancy model: records mismatches found when validating a delivery."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Discrepancy(Base):
    """A single mismatch between what was ordered and what was delivered.

    Rows are only ever created by the delivery validator. The triage
    columns (``corrective_action``, ``handled_by``, ``resolved_at``) belong
    to the follow-up workflow and start out empty.
    """

    __tablename__ = "discrepancies"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    flight_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("flights.id"),
        nullable=False,
        index=True,
    )
    article_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("articles.id"),
        nullable=False,
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("purchase_orders.id"),
        nullable=True,
    )
    delivery_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("deliveries.id"),
        nullable=True,
        index=True,
    )
    kind: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        comment=(
            "quantity_over | quantity_under | article_missing "
            "| article_extra | price_mismatch"
        ),
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        comment="pending | in_progress | resolved | accepted | rejected",
    )
    ordered_quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    delivered_quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    quantity_delta: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    ordered_unit_price: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    delivered_unit_price: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    amount_delta: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
    )
    corrective_action: Mapped[Optional[str]] = mapped_column(
        String(1000),
    )
    handled_by: Mapped[Optional[str]] = mapped_column(
        String(100),
    )
    detected_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("ix_discrepancy_kind_status", "kind", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Discrepancy(kind={self.kind!r}, status={self.status!r}, "
            f"article_id={self.article_id!r}, quantity_delta={self.quantity_delta})>"
        )
