"""Pydantic schemas for discrepancies and summary views."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DiscrepancyResponse(BaseModel):
    """Full discrepancy record returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    flight_id: UUID
    article_id: UUID
    order_id: Optional[UUID] = None
    delivery_id: Optional[UUID] = None
    kind: str = Field(
        ...,
        description=(
            "quantity_over | quantity_under | article_missing "
            "| article_extra | price_mismatch"
        ),
    )
    status: str = Field(
        ...,
        description="pending | in_progress | resolved | accepted | rejected",
    )
    ordered_quantity: int
    delivered_quantity: int
    quantity_delta: int
    ordered_unit_price: Decimal
    delivered_unit_price: Decimal
    amount_delta: Decimal
    description: Optional[str] = None
    corrective_action: Optional[str] = None
    handled_by: Optional[str] = None
    detected_at: datetime
    resolved_at: Optional[datetime] = None
    created_at: datetime


class DiscrepancySummary(BaseModel):
    """Aggregated discrepancy statistics for budget and audit reports."""

    total_count: int = Field(
        ...,
        description="Total number of discrepancies",
    )
    by_kind: dict[str, int] = Field(
        default_factory=dict,
        description="Count of discrepancies grouped by kind",
    )
    by_status: dict[str, int] = Field(
        default_factory=dict,
        description="Count of discrepancies grouped by triage status",
    )
    amount_by_kind: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Sum of absolute amount deltas grouped by kind",
    )
    total_abs_amount: Decimal = Field(
        ...,
        description="Sum of |amount_delta| across all discrepancies",
    )
    net_amount_delta: Decimal = Field(
        ...,
        description="Signed sum of amount_delta (delivered minus ordered)",
    )
