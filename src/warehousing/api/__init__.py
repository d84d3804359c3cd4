from warehousing.api.errors import register_error_handlers
from warehousing.api.routes import adjustment_router, report_router, transfer_router, warehouse_router

__all__ = [
    "adjustment_router",
    "register_error_handlers",
    "report_router",
    "transfer_router",
    "warehouse_router",
]
