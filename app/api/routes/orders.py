"""Purchase order endpoints.

Orders are created with all their lines in one request; they are read
back with lines eagerly loaded.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.models.order import PurchaseOrder
from app.schemas.order import OrderCreate, OrderResponse
from app.services.procurement import create_order
from app.services.reconciliation.store import DiscrepancyStore

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=201)
def post_order(
    body: OrderCreate,
    db: Session = Depends(get_db),
) -> PurchaseOrder:
    """Create a purchase order for a flight, with its lines."""
    try:
        return create_order(db, body)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except IntegrityError:
        db.rollback()
        logger.warning("Order number already used: %s", body.number)
        raise HTTPException(
            status_code=409, detail=f"Order {body.number} already exists"
        )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
) -> PurchaseOrder:
    """Retrieve a single purchase order by ID."""
    try:
        return DiscrepancyStore(db).load_order(order_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
