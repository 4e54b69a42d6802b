"""API route modules."""

from .customers import router as customers_router
from .health import router as health_router
from .invoices import router as invoices_router

__all__ = ["health_router", "customers_router", "invoices_router"]
