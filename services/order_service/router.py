from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import STATUS_UPDATE_RATE_LIMIT
from shared.security import Actor, limiter, require_buyer, require_operator, require_supplier
from services.notification_service.dispatcher import (
    NotificationDispatcher,
    get_notification_dispatcher,
)
from .exceptions import (
    ConcurrentUpdateConflict,
    IllegalTransition,
    OrderAccessDenied,
    OrderError,
    OrderNotFound,
)
from .queries import OrderQueryService
from .schemas import (
    BuyerStatusUpdate,
    BuyerStatusUpdateResponse,
    OperatorOrderPage,
    OperatorStatusUpdate,
    OperatorStatusUpdateResponse,
    OrderListQuery,
    OrderStatusView,
    SupplierOrderView,
    SupplierStatusUpdate,
    SupplierStatusUpdateResponse,
)
from .service import OrderService
from .statuses import OrderStatus, normalize_status

admin_router = APIRouter(prefix="/admin/orders", dependencies=[Depends(require_operator)])
seller_router = APIRouter(prefix="/seller/orders", dependencies=[Depends(require_supplier)])
buyer_router = APIRouter(prefix="/buyer/orders", dependencies=[Depends(require_buyer)])
public_router = APIRouter()  # For any public endpoints (e.g. health check)

ERROR_STATUS_CODES = (
    (OrderNotFound, 404),
    (OrderAccessDenied, 403),
    (IllegalTransition, 400),
    (ConcurrentUpdateConflict, 409),
)


async def order_error_handler(request: Request, exc: OrderError) -> JSONResponse:
    status_code = next((code for kind, code in ERROR_STATUS_CODES if isinstance(exc, kind)), 400)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


# --- Operator console ---

@admin_router.get("", response_model=OperatorOrderPage)
async def list_orders(
    query: Annotated[OrderListQuery, Query()],
    db: AsyncSession = Depends(get_db),
):
    return await OrderQueryService.list_operator_orders(db, query)


@admin_router.patch("/{order_id}/status", response_model=OperatorStatusUpdateResponse)
@limiter.limit(STATUS_UPDATE_RATE_LIMIT)
async def update_order_status(
    request: Request,                          # slowapi reads the caller from here
    payload: OperatorStatusUpdate,
    background_tasks: BackgroundTasks,
    order_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_operator),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    transition = await OrderService.update_status(
        db, actor, order_id, payload.next_status, reason=payload.note
    )
    if transition.notification is not None:
        background_tasks.add_task(dispatcher.dispatch_status_change, transition.notification)

    return OperatorStatusUpdateResponse(
        order_id=transition.order_id,
        order_number=transition.order_number,
        previous_status=transition.previous_status,
        status=transition.status,
        updated_at=transition.updated_at,
        restocked=transition.restocked,
        notes=transition.notes,
    )


# --- Supplier console ---

@seller_router.get("", response_model=list[SupplierOrderView])
async def list_supplier_orders(
    actor: Actor = Depends(require_supplier),
    db: AsyncSession = Depends(get_db),
):
    return await OrderQueryService.list_supplier_orders(db, actor.supplier_id)


@seller_router.patch("/{order_id}/status", response_model=SupplierStatusUpdateResponse)
@limiter.limit(STATUS_UPDATE_RATE_LIMIT)
async def update_supplier_order_status(
    request: Request,
    payload: SupplierStatusUpdate,
    background_tasks: BackgroundTasks,
    order_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_supplier),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    transition = await OrderService.update_status(
        db,
        actor,
        order_id,
        OrderStatus(payload.next_status.value),
        reason=payload.cancellation_reason,
    )
    if transition.notification is not None:
        background_tasks.add_task(dispatcher.dispatch_status_change, transition.notification)

    return SupplierStatusUpdateResponse(
        order=OrderStatusView(
            id=transition.order_id,
            status=transition.status,
            updated_at=transition.updated_at,
            cancellation_reason=transition.cancellation_reason,
            cancelled_at=transition.cancelled_at,
        )
    )


# --- Buyer self-service ---

@buyer_router.get("/{order_id}/status", response_model=OrderStatusView)
async def get_buyer_order_status(
    order_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_buyer),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.get_buyer_order(db, actor, order_id)
    return OrderStatusView(
        id=order.id,
        status=normalize_status(order.status),
        updated_at=order.updated_at or order.created_at,
        cancellation_reason=order.cancellation_reason,
        cancelled_at=order.cancelled_at,
    )


@buyer_router.patch("/{order_id}/status", response_model=BuyerStatusUpdateResponse)
@limiter.limit(STATUS_UPDATE_RATE_LIMIT)
async def cancel_buyer_order(
    request: Request,
    payload: BuyerStatusUpdate,
    background_tasks: BackgroundTasks,
    order_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_buyer),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    transition = await OrderService.update_status(
        db, actor, order_id, OrderStatus(payload.next_status), reason=payload.reason
    )
    if transition.notification is not None:
        background_tasks.add_task(dispatcher.dispatch_status_change, transition.notification)

    return BuyerStatusUpdateResponse(
        order=OrderStatusView(
            id=transition.order_id,
            status=transition.status,
            updated_at=transition.updated_at,
            cancellation_reason=transition.cancellation_reason,
            cancelled_at=transition.cancelled_at,
        ),
        refund_summary=transition.refund_summary,
    )
