"""Pydantic schemas for deliveries, their lines, and validation."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DeliveryLineCreate(BaseModel):
    """One delivered item.

    Either ``article_id`` or a free-text ``article_name`` should be given;
    lines without an article id are stored but never reconciled.
    """

    article_id: Optional[UUID] = None
    article_name: Optional[str] = Field(None, max_length=200)
    quantity: int = Field(..., ge=0)
    unit_price: Decimal = Field(
        Decimal("0"),
        ge=0,
        max_digits=15,
        decimal_places=2,
    )
    comments: Optional[str] = None


class DeliveryCreate(BaseModel):
    """Request body to record a delivery with all of its lines."""

    number: str = Field(..., max_length=50)
    flight_id: Optional[UUID] = None
    order_id: Optional[UUID] = Field(
        None,
        description="Purchase order this delivery fulfils; None = unplanned delivery",
    )
    delivery_date: date
    supplier: str = Field(..., max_length=100)
    carrier: Optional[str] = Field(None, max_length=100)
    status: str = Field(
        "pending",
        pattern="^(pending|received)$",
        description="Initial status: pending | received",
    )
    comments: Optional[str] = Field(None, max_length=500)
    lines: list[DeliveryLineCreate] = Field(default_factory=list)


class DeliveryLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    position: int
    article_id: Optional[UUID] = None
    article_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_amount: Decimal
    comments: Optional[str] = None


class DeliveryResponse(BaseModel):
    """Delivery returned by the API, lines included."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    number: str
    flight_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    delivery_date: date
    supplier: str
    carrier: Optional[str] = None
    status: str = Field(..., description="pending | received | validated | rejected")
    total_amount: Decimal
    comments: Optional[str] = None
    validated_by: Optional[str] = None
    validated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    lines: list[DeliveryLineResponse] = Field(default_factory=list)


class ValidationRequest(BaseModel):
    """Who is validating. Authorization happens before this service is called."""

    validated_by: str = Field(..., min_length=1, max_length=100)


class ValidationResponse(BaseModel):
    """Result of ``POST /deliveries/{id}/validate``."""

    success: bool
    delivery_id: UUID
    status: str
    validated_by: str
    validated_at: datetime
    discrepancies_generated: bool = Field(
        ...,
        description="True when the delivery is linked to an order and detection ran",
    )
    discrepancy_count: int = Field(
        ...,
        description="Number of discrepancy records written",
    )
    discrepancy_ids: list[UUID] = Field(default_factory=list)


class StatusUpdateRequest(BaseModel):
    """Manual status change. ``validated`` is only reachable through validation."""

    status: str = Field(..., pattern="^(received|rejected)$")
