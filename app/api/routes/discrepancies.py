"""Discrepancy query endpoints.

Read-only views over the records produced by delivery validation:
filtered listing with pagination, summary statistics for budget
reporting, and single-record lookup.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.logging import get_logger
from app.models.discrepancy import Discrepancy
from app.schemas.discrepancy import DiscrepancyResponse, DiscrepancySummary

logger = get_logger(__name__)

router = APIRouter()

CENT = Decimal("0.01")


def _parse_date(value: Optional[str], name: str) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name} format: {value}")


def _detected_until(value: Optional[str]):
    """Upper bound on ``detected_at``; a bare date includes that whole day."""
    dt_to = _parse_date(value, "date_to")
    if dt_to is None:
        return None
    if len(value) == 10:
        return Discrepancy.detected_at < dt_to + timedelta(days=1)
    return Discrepancy.detected_at <= dt_to


def _to_decimal(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENT) if value is not None else Decimal("0.00")


@router.get("", response_model=list[DiscrepancyResponse])
def list_discrepancies(
    kind: Optional[str] = Query(None, description="Filter by discrepancy kind"),
    status: Optional[str] = Query(None, description="Filter by triage status"),
    flight_id: Optional[UUID] = Query(None, description="Filter by flight"),
    delivery_id: Optional[UUID] = Query(None, description="Filter by delivery"),
    date_from: Optional[str] = Query(
        None, description="Filter by detected_at >= date (YYYY-MM-DD)"
    ),
    date_to: Optional[str] = Query(
        None, description="Filter by detected_at <= date (YYYY-MM-DD = whole day)"
    ),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=500, description="Items per page"),
    db: Session = Depends(get_db),
) -> list:
    """List discrepancies with optional filters and pagination."""
    query = db.query(Discrepancy)

    if kind is not None:
        query = query.filter(Discrepancy.kind == kind)
    if status is not None:
        query = query.filter(Discrepancy.status == status)
    if flight_id is not None:
        query = query.filter(Discrepancy.flight_id == flight_id)
    if delivery_id is not None:
        query = query.filter(Discrepancy.delivery_id == delivery_id)
    dt_from = _parse_date(date_from, "date_from")
    if dt_from is not None:
        query = query.filter(Discrepancy.detected_at >= dt_from)
    until = _detected_until(date_to)
    if until is not None:
        query = query.filter(until)

    total = query.count()
    offset = (page - 1) * limit
    items = (
        query.order_by(Discrepancy.detected_at.desc(), Discrepancy.kind)
        .offset(offset)
        .limit(limit)
        .all()
    )

    logger.info(
        "Discrepancies query: total=%d page=%d limit=%d returned=%d",
        total,
        page,
        limit,
        len(items),
    )
    return items


@router.get("/summary", response_model=DiscrepancySummary)
def discrepancy_summary(
    date_from: Optional[str] = Query(
        None, description="Only count detected_at >= date (YYYY-MM-DD)"
    ),
    date_to: Optional[str] = Query(
        None, description="Only count detected_at <= date (YYYY-MM-DD = whole day)"
    ),
    db: Session = Depends(get_db),
) -> DiscrepancySummary:
    """Summary statistics: counts by kind and status, absolute and net amounts."""
    filters = []
    dt_from = _parse_date(date_from, "date_from")
    if dt_from is not None:
        filters.append(Discrepancy.detected_at >= dt_from)
    until = _detected_until(date_to)
    if until is not None:
        filters.append(until)

    total_count = db.query(Discrepancy).filter(*filters).count()

    # Group by kind
    by_kind_rows = (
        db.query(
            Discrepancy.kind,
            func.count(Discrepancy.id),
            func.sum(func.abs(Discrepancy.amount_delta)),
        )
        .filter(*filters)
        .group_by(Discrepancy.kind)
        .all()
    )
    by_kind = {row[0]: row[1] for row in by_kind_rows}
    amount_by_kind = {row[0]: _to_decimal(row[2]) for row in by_kind_rows}

    # Group by status
    by_status_rows = (
        db.query(Discrepancy.status, func.count(Discrepancy.id))
        .filter(*filters)
        .group_by(Discrepancy.status)
        .all()
    )
    by_status = {row[0]: row[1] for row in by_status_rows}

    # Totals
    total_abs, net = (
        db.query(
            func.sum(func.abs(Discrepancy.amount_delta)),
            func.sum(Discrepancy.amount_delta),
        )
        .filter(*filters)
        .one()
    )

    return DiscrepancySummary(
        total_count=total_count,
        by_kind=by_kind,
        by_status=by_status,
        amount_by_kind=amount_by_kind,
        total_abs_amount=_to_decimal(total_abs),
        net_amount_delta=_to_decimal(net),
    )


@router.get("/{discrepancy_id}", response_model=DiscrepancyResponse)
def get_discrepancy(
    discrepancy_id: UUID,
    db: Session = Depends(get_db),
) -> Discrepancy:
    """Retrieve a single discrepancy by ID."""
    discrepancy = db.get(Discrepancy, discrepancy_id)
    if discrepancy is None:
        raise HTTPException(status_code=404, detail="Discrepancy not found")
    return discrepancy
