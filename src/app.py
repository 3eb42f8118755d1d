"""Jamaah Marketplace FastAPI application.

Serves the marketplace catalog, cart quotes, checkout and order submission to
jamaah, and the order review endpoints to administrators. Commands are processed
synchronously within each request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay from marketplace/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from marketplace.domain import marketplace  # noqa: E402
from marketplace.utils.logging import add_context, clear_context, configure_logging, get_logger
from protean.integrations.fastapi import register_exception_handlers

configure_logging()
logger = get_logger(__name__)

marketplace.init()

_DOMAIN_PREFIXES = ("/marketplace", "/admin/marketplace")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Jamaah Marketplace API",
    description="Marketplace catalog, cart, checkout and payment-proof order review",
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
    """Push the marketplace domain context and per-request log fields for marketplace routes."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        # Health check, docs
        return await call_next(request)

    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        with marketplace.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from marketplace.api import (  # noqa: E402
    cart_router,
    catalog_admin_router,
    catalog_router,
    order_admin_router,
    order_router,
    register_marketplace_exception_handlers,
)

app.include_router(catalog_router)
app.include_router(catalog_admin_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(order_admin_router)

register_exception_handlers(app)
register_marketplace_exception_handlers(app)

logger.info("Marketplace API ready", domain=marketplace.name)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "marketplace": {"name": marketplace.name},
            },
        }
    )
