"""Storefront Warehousing FastAPI application.

Processes warehousing commands synchronously over HTTP. Every request to a
warehousing route runs inside the warehousing domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - unset/"test" → event_processing = "sync"  (activity log written in the UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from warehousing.domain import warehousing
from warehousing.utils.logging import add_context, clear_context, configure_logging

configure_logging()
warehousing.init()

_DOMAIN_PREFIXES = ("/warehouses", "/inventory", "/transfers")

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Warehousing API",
    description="Multi-warehouse stock ledgers, adjustments, transfers and alerts",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the warehousing domain context for warehousing routes."""
    clear_context()
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        add_context(method=request.method, path=request.url.path)
        with warehousing.domain_context():
            return await call_next(request)
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from warehousing.api import (  # noqa: E402
    adjustment_router,
    register_error_handlers,
    report_router,
    transfer_router,
    warehouse_router,
)

register_error_handlers(app)
app.include_router(warehouse_router)
app.include_router(adjustment_router)
app.include_router(transfer_router)
app.include_router(report_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": warehousing.name})
