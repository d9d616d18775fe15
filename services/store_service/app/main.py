"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.store_service.routers import (
    admin_catalog_router,
    cart_router,
    catalog_router,
    orders_router,
    payment_router,
)


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="PowerStore Store Service",
        version="0.1.0",
        description="Cart, checkout, Razorpay payments and orders for the PowerStore catalog.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Every error leaves as {"success": false, "message": ...}
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    prefix = settings.API_PREFIX
    app.include_router(catalog_router, prefix=prefix)
    app.include_router(cart_router, prefix=prefix)
    app.include_router(orders_router, prefix=prefix)
    app.include_router(payment_router, prefix=prefix)
    app.include_router(admin_catalog_router, prefix=prefix)

    return app


app = create_app()
