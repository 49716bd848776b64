"""Pydantic schemas for purchase orders and their lines."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import OrderStatus


class OrderLineCreate(BaseModel):
    """One ordered article. ``line_amount`` is computed server-side."""

    article_id: UUID
    quantity: int = Field(..., ge=0)
    unit_price: Decimal = Field(
        Decimal("0"),
        ge=0,
        max_digits=15,
        decimal_places=2,
    )
    comments: Optional[str] = None


class OrderCreate(BaseModel):
    """Request body to create a purchase order with all of its lines."""

    number: str = Field(..., max_length=50)
    flight_id: UUID
    order_date: date
    supplier: Optional[str] = Field(None, max_length=100)
    status: OrderStatus = Field(
        OrderStatus.DRAFT,
        description="draft | sent | confirmed | cancelled",
    )
    comments: Optional[str] = Field(None, max_length=500)
    created_by: Optional[str] = Field(None, max_length=100)
    lines: list[OrderLineCreate] = Field(default_factory=list)


class OrderLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    position: int
    article_id: UUID
    quantity: int
    unit_price: Decimal
    line_amount: Decimal
    comments: Optional[str] = None


class OrderResponse(BaseModel):
    """Purchase order returned by the API, lines included."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    number: str
    flight_id: UUID
    order_date: date
    supplier: Optional[str] = None
    status: str
    total_amount: Decimal
    comments: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    lines: list[OrderLineResponse] = Field(default_factory=list)
