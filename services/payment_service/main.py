from fastapi import FastAPI

from shared.observability.setup import setup_observability
from services.order_service.exceptions import OrderError
from services.order_service.router import order_error_handler

from .router import router, public_router


payment_app = FastAPI(title="Payment Events Service", version="2.0.0")

# Structured logs, OTLP traces and /metrics
setup_observability(payment_app, "payment_service")

payment_app.add_exception_handler(OrderError, order_error_handler)

payment_app.include_router(public_router)
payment_app.include_router(router)
