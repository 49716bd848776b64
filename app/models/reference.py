"""Reference tables the reconciliation records point at: flights and articles."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Flight(Base):
    """A catered flight. Orders, deliveries and discrepancies reference it."""

    __tablename__ = "flights"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    flight_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )
    flight_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    origin: Mapped[Optional[str]] = mapped_column(
        String(10),
    )
    destination: Mapped[Optional[str]] = mapped_column(
        String(10),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<Flight(flight_number={self.flight_number!r}, "
            f"flight_date={self.flight_date!r})>"
        )


class Article(Base):
    """A catalog item. ``Article.id`` is the article identity lines are keyed on."""

    __tablename__ = "articles"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    unit: Mapped[Optional[str]] = mapped_column(
        String(20),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Article(code={self.code!r}, name={self.name!r})>"
