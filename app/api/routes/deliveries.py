"""Delivery endpoints.

Provides routes to record a delivery, read it back, validate it against
its purchase order, mark it received or rejected, and list the
discrepancies that validation produced.
"""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import (
    ConflictError,
    DuplicateArticleLineError,
    InvalidStatusTransitionError,
    NotFoundError,
    ReconciliationPersistenceError,
)
from app.core.logging import get_logger
from app.models.delivery import Delivery
from app.models.discrepancy import Discrepancy
from app.schemas.delivery import (
    DeliveryCreate,
    DeliveryResponse,
    StatusUpdateRequest,
    ValidationRequest,
    ValidationResponse,
)
from app.schemas.discrepancy import DiscrepancyResponse
from app.services.procurement import create_delivery
from app.services.reconciliation.store import DiscrepancyStore
from app.services.reconciliation.validator import DeliveryValidator

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=DeliveryResponse, status_code=201)
def post_delivery(
    body: DeliveryCreate,
    db: Session = Depends(get_db),
) -> Delivery:
    """Record a delivery with its lines, optionally linked to an order."""
    try:
        return create_delivery(db, body)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except IntegrityError:
        db.rollback()
        logger.warning("Delivery number already used: %s", body.number)
        raise HTTPException(
            status_code=409, detail=f"Delivery {body.number} already exists"
        )


@router.get("/{delivery_id}", response_model=DeliveryResponse)
def get_delivery(
    delivery_id: UUID,
    db: Session = Depends(get_db),
) -> Delivery:
    """Retrieve a single delivery by ID."""
    try:
        return DiscrepancyStore(db).load_delivery(delivery_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)


@router.post("/{delivery_id}/validate", response_model=ValidationResponse)
def validate_delivery(
    delivery_id: UUID,
    body: ValidationRequest,
    db: Session = Depends(get_db),
) -> ValidationResponse:
    """Validate a delivery and generate its discrepancies.

    404 when the delivery does not exist, 409 when it is already
    validated, 422 when duplicate article lines are rejected by
    configuration, 500 when the database refused the write (nothing
    was changed; the call may be retried).
    """
    validator = DeliveryValidator(db=db, config=settings)

    try:
        outcome = validator.validate(delivery_id, body.validated_by)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.message)
    except DuplicateArticleLineError as exc:
        raise HTTPException(status_code=422, detail=exc.message)
    except ReconciliationPersistenceError:
        raise HTTPException(
            status_code=500, detail="Validation could not be saved; please retry"
        )

    return ValidationResponse(
        success=outcome.success,
        delivery_id=outcome.delivery_id,
        status=outcome.status,
        validated_by=outcome.validated_by,
        validated_at=outcome.validated_at,
        discrepancies_generated=outcome.discrepancies_generated,
        discrepancy_count=outcome.discrepancy_count,
        discrepancy_ids=list(outcome.discrepancy_ids),
    )


@router.put("/{delivery_id}/status", response_model=DeliveryResponse)
def update_delivery_status(
    delivery_id: UUID,
    body: StatusUpdateRequest,
    db: Session = Depends(get_db),
) -> Delivery:
    """Mark a delivery as received or rejected.

    404 when the delivery does not exist, 409 when it is already
    validated, 422 for any other target status.
    """
    validator = DeliveryValidator(db=db, config=settings)

    try:
        return validator.change_status(delivery_id, body.status)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.message)
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=422, detail=exc.message)
    except ReconciliationPersistenceError:
        raise HTTPException(
            status_code=500, detail="Status change could not be saved; please retry"
        )


@router.get("/{delivery_id}/discrepancies", response_model=List[DiscrepancyResponse])
def list_delivery_discrepancies(
    delivery_id: UUID,
    db: Session = Depends(get_db),
) -> list[Discrepancy]:
    """Discrepancies recorded when this delivery was validated."""
    if db.get(Delivery, delivery_id) is None:
        raise HTTPException(status_code=404, detail=f"Delivery {delivery_id} not found")

    return (
        db.query(Discrepancy)
        .filter(Discrepancy.delivery_id == delivery_id)
        .order_by(Discrepancy.created_at, Discrepancy.kind)
        .all()
    )
