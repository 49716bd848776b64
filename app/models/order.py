"""Purchase order model: what was requested from the caterer for a flight."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class PurchaseOrder(Base):
    """A procurement request listing expected articles, quantities and prices.

    Lines are added at creation and ``total_amount`` is the sum of their
    line amounts. Once confirmed, the order is treated as immutable by
    its callers.
    """

    __tablename__ = "purchase_orders"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    flight_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("flights.id"),
        nullable=False,
        index=True,
    )
    supplier: Mapped[Optional[str]] = mapped_column(
        String(100),
    )
    order_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="draft",
        comment="draft | sent | confirmed | cancelled",
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    comments: Mapped[Optional[str]] = mapped_column(
        String(500),
    )
    created_by: Mapped[Optional[str]] = mapped_column(
        String(100),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        onupdate=func.now(),
    )

    # -- Relationships --
    lines: Mapped[list[OrderLine]] = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<PurchaseOrder(number={self.number!r}, status={self.status!r}, "
            f"total_amount={self.total_amount})>"
        )


class OrderLine(Base):
    """One ordered article with its quantity and agreed unit price."""

    __tablename__ = "order_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Original sequence of the line within its order",
    )
    article_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("articles.id"),
        nullable=False,
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

    order: Mapped[PurchaseOrder] = relationship(
        "PurchaseOrder",
        back_populates="lines",
    )

    def __repr__(self) -> str:
        return (
            f"<OrderLine(article_id={self.article_id!r}, quantity={self.quantity}, "
            f"unit_price={self.unit_price})>"
        )
