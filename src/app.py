"""Krishna Marketing FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Every request runs inside the grocery domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - default      → in-memory providers
#   - "production" → PostgreSQL (DATABASE_URL)
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from grocery.domain import grocery
from grocery.utils.logging import bind_request_context, clear_request_context, configure_logging, get_logger

configure_logging()
grocery.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
from grocery.api.errors import register_exception_handlers  # noqa: E402
from grocery.api.rate_limit import RateLimitMiddleware  # noqa: E402

app = FastAPI(
    title="Krishna Marketing API",
    description="Grocery delivery backend: catalogue, cart, checkout, delivery and loyalty",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware, prefix="/api")

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the grocery domain context and bind a request id for logging."""
    bind_request_context(request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex)
    try:
        with grocery.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from grocery.api.admin import router as admin_router  # noqa: E402
from grocery.api.cart import router as cart_router  # noqa: E402
from grocery.api.catalogue import category_router, product_router  # noqa: E402
from grocery.api.coupons import router as coupon_router  # noqa: E402
from grocery.api.customers import address_router, customer_router, loyalty_router  # noqa: E402
from grocery.api.delivery import router as delivery_router  # noqa: E402
from grocery.api.notifications import router as notification_router  # noqa: E402
from grocery.api.offers import router as offer_router  # noqa: E402
from grocery.api.orders import router as order_router  # noqa: E402
from grocery.api.payments import router as payment_router  # noqa: E402
from grocery.api.tracking import router as tracking_router  # noqa: E402

app.include_router(product_router, prefix="/api")
app.include_router(category_router, prefix="/api")
app.include_router(cart_router, prefix="/api")
app.include_router(order_router, prefix="/api")
app.include_router(delivery_router, prefix="/api")
app.include_router(coupon_router, prefix="/api")
app.include_router(customer_router, prefix="/api")
app.include_router(address_router, prefix="/api")
app.include_router(loyalty_router, prefix="/api")
app.include_router(notification_router, prefix="/api")
app.include_router(offer_router, prefix="/api")
app.include_router(payment_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(tracking_router, prefix="/api")


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": grocery.name})


logger.info("application started", domain=grocery.name, routes=len(app.routes))
