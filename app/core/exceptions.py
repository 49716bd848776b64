"""Typed exceptions raised by the reconciliation services.

Routes catch these by type and map them onto HTTP status codes; every
exception carries a machine-readable ``code`` so API clients never have
to parse messages.

    ReconciliationError
    +-- NotFoundError
    |   +-- DeliveryNotFoundError
    |   +-- OrderNotFoundError
    |   +-- FlightNotFoundError
    |   +-- ArticleNotFoundError
    +-- ConflictError
    |   +-- DeliveryAlreadyValidatedError
    +-- DuplicateArticleLineError
    +-- InvalidStatusTransitionError
    +-- ReconciliationPersistenceError
"""

from __future__ import annotations

from typing import Any


class ReconciliationError(Exception):
    """Base class for every error raised by this service."""

    code: str = "RECONCILIATION_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ── Lookup failures ─────────────────────────────────────────────────


class NotFoundError(ReconciliationError):
    """A referenced record does not exist."""

    code = "NOT_FOUND"
    entity = "Record"

    def __init__(self, entity_id: Any) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class DeliveryNotFoundError(NotFoundError):
    code = "DELIVERY_NOT_FOUND"
    entity = "Delivery"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"
    entity = "Order"


class FlightNotFoundError(NotFoundError):
    code = "FLIGHT_NOT_FOUND"
    entity = "Flight"


class ArticleNotFoundError(NotFoundError):
    code = "ARTICLE_NOT_FOUND"
    entity = "Article"


# ── State conflicts ─────────────────────────────────────────────────


class ConflictError(ReconciliationError):
    """The requested transition is not allowed from the current state."""

    code = "CONFLICT"


class DeliveryAlreadyValidatedError(ConflictError):
    """Validation is not idempotent: a validated delivery stays validated."""

    code = "DELIVERY_ALREADY_VALIDATED"

    def __init__(self, delivery_id: Any) -> None:
        self.delivery_id = delivery_id
        super().__init__(f"Delivery {delivery_id} is already validated")


# ── Input / persistence ─────────────────────────────────────────────


class DuplicateArticleLineError(ReconciliationError):
    """An order or delivery lists the same article on more than one line."""

    code = "DUPLICATE_ARTICLE_LINE"

    def __init__(self, article_id: Any, source: str) -> None:
        self.article_id = article_id
        self.source = source
        super().__init__(
            f"Article {article_id} appears on more than one {source} line"
        )


class ReconciliationPersistenceError(ReconciliationError):
    """The unit of work could not be committed; nothing was written."""

    code = "PERSISTENCE_FAILURE"


class InvalidStatusTransitionError(ReconciliationError):
    """The requested status cannot be set directly on a delivery."""

    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, delivery_id: Any, status: str) -> None:
        self.delivery_id = delivery_id
        self.status = status
        super().__init__(
            f"Delivery {delivery_id} cannot be moved to '{status}' directly"
        )
