"""Delivery validator: turns a received delivery into a validated one.

Validating a delivery is one unit of work:
  1. Load the delivery, its lines, its linked order and the order's lines.
  2. Refuse if the delivery is already validated.
  3. Flip the status to validated and stamp who and when.
  4. If an order is linked, snapshot both sides, index them by article,
     and detect discrepancies.
  5. Insert every discrepancy, flush the delivery, commit.

Manual status changes (received, rejected) use the same unit of work.

Any failure at any step rolls the whole session back: the status never
changes without its discrepancies, and no discrepancy is left behind for
a delivery that is still unvalidated.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.clock import Clock, SystemClock
from app.core.config import Settings
from app.core.exceptions import (
    DeliveryAlreadyValidatedError,
    InvalidStatusTransitionError,
    ReconciliationPersistenceError,
)
from app.core.logging import get_logger
from app.models.delivery import Delivery
from app.models.enums import DeliveryStatus
from app.services.reconciliation.detector import DetectedDiscrepancy, detect
from app.services.reconciliation.index import build_line_index
from app.services.reconciliation.snapshots import DeliverySnapshot
from app.services.reconciliation.store import DiscrepancyStore

logger = get_logger(__name__)

# Statuses a caller may set directly; ``validated`` goes through ``validate``.
MANUAL_STATUSES = (DeliveryStatus.RECEIVED.value, DeliveryStatus.REJECTED.value)


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of a committed validation.

    ``discrepancies_generated`` tells whether detection ran at all, i.e.
    whether the delivery was linked to an order.  ``discrepancy_count``
    is the number of records actually written.
    """

    delivery_id: uuid.UUID
    status: str
    validated_by: str
    validated_at: datetime
    discrepancies_generated: bool
    discrepancies: tuple[DetectedDiscrepancy, ...] = ()
    discrepancy_ids: tuple[uuid.UUID, ...] = ()

    @property
    def success(self) -> bool:
        return self.status == DeliveryStatus.VALIDATED.value

    @property
    def discrepancy_count(self) -> int:
        return len(self.discrepancies)


class DeliveryValidator:
    """Validates one delivery and records its discrepancies atomically."""

    def __init__(
        self,
        db: Session,
        config: Settings,
        clock: Optional[Clock] = None,
        store: Optional[DiscrepancyStore] = None,
    ) -> None:
        self.db = db
        self.config = config
        self.clock = clock or SystemClock()
        self.store = store or DiscrepancyStore(db)

    # ── Public API ───────────────────────────────────────────────────

    def validate(self, delivery_id: uuid.UUID, validated_by: str) -> ValidationOutcome:
        """Validate a delivery.

        Args:
            delivery_id: Delivery to validate.
            validated_by: Identity of the person validating, kept for audit.

        Returns:
            The committed ``ValidationOutcome``.

        Raises:
            DeliveryNotFoundError: The delivery does not exist.
            DeliveryAlreadyValidatedError: The delivery was validated before,
                possibly by a concurrent request.
            DuplicateArticleLineError: Duplicate article lines under the
                ``reject`` policy.
            ReconciliationPersistenceError: The database refused the unit of
                work; nothing was written and the call may be retried.
        """
        logger.info("Validation requested: delivery=%s by=%s", delivery_id, validated_by)

        outcome = self._run("validation", delivery_id, self._validate, validated_by)

        logger.info(
            "Delivery validated: delivery=%s discrepancies=%d detection_ran=%s",
            delivery_id,
            outcome.discrepancy_count,
            outcome.discrepancies_generated,
        )
        return outcome

    def change_status(self, delivery_id: uuid.UUID, status: str) -> Delivery:
        """Move a delivery to ``received`` or ``rejected``.

        ``validated`` is never accepted here: it is only reachable through
        ``validate`` so that discrepancies are always generated.

        Raises:
            DeliveryNotFoundError: The delivery does not exist.
            DeliveryAlreadyValidatedError: The delivery is validated and
                its status can no longer change.
            InvalidStatusTransitionError: ``status`` is not a manual target.
            ReconciliationPersistenceError: The update could not be committed.
        """
        if status not in MANUAL_STATUSES:
            raise InvalidStatusTransitionError(delivery_id, status)

        delivery = self._run("status change", delivery_id, self._change_status, status)
        logger.info("Delivery status changed: delivery=%s status=%s", delivery_id, status)
        return delivery

    # ── Private helpers ──────────────────────────────────────────────

    def _run(self, action: str, delivery_id: uuid.UUID, work, *args):
        """Run ``work`` as one unit of work: commit on success, roll back otherwise."""
        try:
            result = work(delivery_id, *args)
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            logger.warning(
                "Concurrent update during %s of delivery=%s; rolled back",
                action,
                delivery_id,
            )
            raise DeliveryAlreadyValidatedError(delivery_id) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Rolled back %s: delivery=%s", action, delivery_id)
            raise ReconciliationPersistenceError(
                f"Could not persist {action} of delivery {delivery_id}: {exc}"
            ) from exc
        except Exception:
            self.db.rollback()
            logger.info("Aborted %s and rolled back: delivery=%s", action, delivery_id)
            raise
        return result

    def _change_status(self, delivery_id: uuid.UUID, status: str) -> Delivery:
        delivery = self.store.load_delivery(
            delivery_id, for_update=self.config.lock_delivery_rows
        )
        if delivery.status == DeliveryStatus.VALIDATED.value:
            raise DeliveryAlreadyValidatedError(delivery_id)

        delivery.status = status
        delivery.updated_at = self.clock.now()
        self.store.save_delivery(delivery)
        return delivery

    def _validate(self, delivery_id: uuid.UUID, validated_by: str) -> ValidationOutcome:
        delivery = self.store.load_delivery(
            delivery_id, for_update=self.config.lock_delivery_rows
        )
        if delivery.status == DeliveryStatus.VALIDATED.value:
            raise DeliveryAlreadyValidatedError(delivery_id)

        snapshot = DeliverySnapshot.from_model(delivery)
        now = self.clock.now()

        self._mark_validated(delivery, validated_by, now)

        detected: tuple[DetectedDiscrepancy, ...] = ()
        if snapshot.order is not None:
            detected = self._detect(snapshot, now)

        rows = [self.store.insert_discrepancy(d) for d in detected]
        self.store.save_delivery(delivery)

        return ValidationOutcome(
            delivery_id=delivery_id,
            status=DeliveryStatus.VALIDATED.value,
            validated_by=validated_by,
            validated_at=now,
            discrepancies_generated=snapshot.order is not None,
            discrepancies=detected,
            discrepancy_ids=tuple(row.id for row in rows),
        )

    @staticmethod
    def _mark_validated(delivery: Delivery, validated_by: str, now: datetime) -> None:
        delivery.status = DeliveryStatus.VALIDATED.value
        delivery.validated_by = validated_by
        delivery.validated_at = now
        delivery.updated_at = now

    def _detect(
        self,
        snapshot: DeliverySnapshot,
        now: datetime,
    ) -> tuple[DetectedDiscrepancy, ...]:
        order = snapshot.order
        policy = self.config.duplicate_article_policy

        order_index = build_line_index(order.lines, policy, source="order")
        delivery_index = build_line_index(snapshot.lines, policy, source="delivery")

        detected = detect(
            order_index,
            delivery_index,
            flight_id=snapshot.flight_ref,
            order_id=order.id,
            delivery_id=snapshot.id,
            detected_at=now,
            tolerance=self.config.amount_tolerance,
            delivery_number=snapshot.number,
        )
        logger.info(
            "Discrepancies detected: delivery=%s order=%s count=%d",
            snapshot.number,
            order.number,
            len(detected),
        )
        return detected
