from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.observability import setup_observability
from shared.security import limiter
from .exceptions import OrderError
from .router import (
    admin_router,
    buyer_router,
    order_error_handler,
    public_router,
    seller_router,
)

order_app = FastAPI(title="Order Fulfillment Service", version="2.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(order_app, "order_service")

# --- SECURITY SETUP ---
order_app.state.limiter = limiter
order_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
order_app.add_exception_handler(OrderError, order_error_handler)

order_app.include_router(public_router)
order_app.include_router(admin_router)
order_app.include_router(seller_router)
order_app.include_router(buyer_router)
