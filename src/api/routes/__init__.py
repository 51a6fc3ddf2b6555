"""API route modules."""

from src.api.routes.analysis import router as analysis_router
from src.api.routes.cash import router as cash_router
from src.api.routes.health import router as health_router
from src.api.routes.inventory import router as inventory_router
from src.api.routes.sales import router as sales_router
from src.api.routes.stats import router as stats_router

__all__ = [
    "health_router",
    "inventory_router",
    "sales_router",
    "cash_router",
    "stats_router",
    "analysis_router",
]
