"""SQLAlchemy models for the catering delivery reconciliation service."""

from app.models.reference import Article, Flight
from app.models.order import OrderLine, PurchaseOrder
from app.models.delivery import Delivery, DeliveryLine
from app.models.discrepancy import Discrepancy

__all__ = [
    "Article",
    "Flight",
    "PurchaseOrder",
    "OrderLine",
    "Delivery",
    "DeliveryLine",
    "Discrepancy",
]
