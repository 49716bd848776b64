"""Delivery model: goods actually received, optionally against an order."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Delivery(Base):
    """A delivery note recorded when goods arrive.

    ``status`` moves pending -> received -> validated (or rejected).
    Validation happens exactly once; ``version`` is bumped on every
    update so two sessions can never both flip the same row.
    """

    __tablename__ = "deliveries"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    flight_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("flights.id"),
        nullable=True,
        index=True,
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("purchase_orders.id"),
        nullable=True,
        index=True,
    )
    supplier: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    carrier: Mapped[Optional[str]] = mapped_column(
        String(100),
    )
    delivery_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        comment="pending | received | validated | rejected",
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    comments: Mapped[Optional[str]] = mapped_column(
        String(500),
    )
    validated_by: Mapped[Optional[str]] = mapped_column(
        String(100),
    )
    validated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
    )

    __mapper_args__ = {"version_id_col": version}

    # -- Relationships --
    lines: Mapped[list[DeliveryLine]] = relationship(
        "DeliveryLine",
        back_populates="delivery",
        cascade="all, delete-orphan",
        order_by="DeliveryLine.position",
        lazy="selectin",
    )
    order: Mapped[Optional[PurchaseOrder]] = relationship(
        "PurchaseOrder",
        lazy="select",
    )

    def __repr__(self) -> str:
        return (
            f"<Delivery(number={self.number!r}, status={self.status!r}, "
            f"order_id={self.order_id!r})>"
        )


class DeliveryLine(Base):
    """One delivered item.

    ``article_id`` is optional: a line may only carry a free-text
    ``article_name`` when the delivered dish was never resolved to a
    catalog article. Such lines are never compared to the order.
    """

    __tablename__ = "delivery_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    delivery_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("deliveries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Original sequence of the line within its delivery",
    )
    article_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("articles.id"),
        nullable=True,
    )
    article_name: Mapped[Optional[str]] = mapped_column(
        String(200),
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    line_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    comments: Mapped[Optional[str]] = mapped_column(
        Text,
    )

    delivery: Mapped[Delivery] = relationship(
        "Delivery",
        back_populates="lines",
    )

    def __repr__(self) -> str:
        return (
            f"<DeliveryLine(article_id={self.article_id!r}, "
            f"quantity={self.quantity}, unit_price={self.unit_price})>"
        )
