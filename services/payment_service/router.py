"""
Payment events arrive from the payment gateway callback, service to service,
so every route requires the X-Internal-API-Key header.
"""
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import verify_internal_api_key

from .schemas import PaymentEventCreate, PaymentOrderResponse
from .service import PaymentService

router = APIRouter(dependencies=[Depends(verify_internal_api_key)])
public_router = APIRouter()  # For any public endpoints (e.g. health check)

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "payment", "status": "running"}


@router.post("/{order_id}/events", response_model=PaymentOrderResponse)
async def apply_payment_event(
    payload: PaymentEventCreate,
    order_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    return await PaymentService.apply_event(db, order_id, payload.status, payload.transaction_id)
