"""Status and kind vocabularies stored as lowercase strings."""

from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    VALIDATED = "validated"
    REJECTED = "rejected"


class DiscrepancyKind(str, Enum):
    QUANTITY_OVER = "quantity_over"
    QUANTITY_UNDER = "quantity_under"
    ARTICLE_MISSING = "article_missing"
    ARTICLE_EXTRA = "article_extra"
    PRICE_MISMATCH = "price_mismatch"


class DiscrepancyStatus(str, Enum):
    """Triage states; the reconciliation engine only ever writes PENDING."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
