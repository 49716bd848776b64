"""GSC Catering Delivery Reconciliation Service - Main Application."""

import logging.config

from fastapi import FastAPI

from app import models  # noqa: F401
from app.api.routes import deliveries, discrepancies, orders
from app.core.config import settings
from app.core.database import Base, engine
from app.core.logging import setup_logging
from app.core.logging_config import LOGGING_CONFIG

# Configure logging before anything else
logging.config.dictConfig(LOGGING_CONFIG)
logger = setup_logging(settings.log_level)

# Create all tables on startup
logger.info("Creating database tables...")
Base.metadata.create_all(bind=engine)
logger.info("Database tables ready")

# -- OpenAPI tag metadata for Swagger grouping --
tags_metadata = [
    {
        "name": "Health",
        "description": "Service health and readiness checks.",
    },
    {
        "name": "Orders",
        "description": (
            "Create and read purchase orders issued to caterers for a flight, "
            "with their ordered articles, quantities and unit prices."
        ),
    },
    {
        "name": "Deliveries",
        "description": (
            "Record deliveries of goods, read them back, and validate them "
            "against their purchase order. Validation generates discrepancies."
        ),
    },
    {
        "name": "Discrepancies",
        "description": (
            "Query discrepancies with filtering (kind, status, flight, delivery, "
            "date range) and get summary statistics for budget reporting."
        ),
    },
]


app = FastAPI(
    title="GSC Catering Delivery Reconciliation Service",
    description=(
        "## Delivery Reconciliation API\n\n"
        "Airline-catering back office service that reconciles received "
        "deliveries against the purchase orders they fulfil and records every "
        "mismatch for budget and audit reporting.\n\n"
        "### Discrepancy Kinds Detected\n"
        "- `quantity_over` - More units delivered than ordered\n"
        "- `quantity_under` - Fewer units delivered than ordered\n"
        "- `article_missing` - Article ordered but not delivered\n"
        "- `article_extra` - Article delivered but not ordered\n"
        "- `price_mismatch` - Same quantity, line amount differs by more than 0.01\n\n"
        "### Quick Start\n"
        "```bash\n"
        "# 1. Create a purchase order\n"
        "curl -X POST /api/v1/orders -H 'Content-Type: application/json' -d @order.json\n\n"
        "# 2. Record the delivery against it\n"
        "curl -X POST /api/v1/deliveries -H 'Content-Type: application/json' -d @delivery.json\n\n"
        "# 3. Validate the delivery\n"
        "curl -X POST /api/v1/deliveries/{id}/validate "
        "-H 'Content-Type: application/json' -d '{\"validated_by\":\"j.doe\"}'\n\n"
        "# 4. Query discrepancies\n"
        "curl /api/v1/discrepancies?kind=article_missing\n"
        "```\n"
    ),
    version="1.0.0",
    openapi_tags=tags_metadata,
    license_info={
        "name": "MIT",
    },
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(deliveries.router, prefix="/api/v1/deliveries", tags=["Deliveries"])
app.include_router(
    discrepancies.router, prefix="/api/v1/discrepancies", tags=["Discrepancies"]
)

logger.info("Reconciliation API ready - routes registered")


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint.

    Returns a simple JSON object confirming the service is running.
    Useful for load balancers and monitoring systems.
    """
    return {"status": "healthy", "service": "gsc-delivery-reconciler"}
