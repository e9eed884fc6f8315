from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.observability import ecomm_payment_events_total
from services.order_service.exceptions import ConcurrentUpdateConflict, OrderNotFound
from services.order_service.repository import OrderRepository
from services.order_service.statuses import OrderStatus, is_void, normalize_status
from .repository import PaymentRepository
from .schemas import PaymentEvent

logger = structlog.get_logger(__name__)

# Payment only pulls an order forward into processing; it never rewinds one
PRE_PROCESSING_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PLACED,
    OrderStatus.CONFIRMED,
})


class PaymentService:
    @staticmethod
    async def apply_event(
        db: AsyncSession,
        order_id: int,
        event: PaymentEvent,
        transaction_id: Optional[str] = None,
    ):
        """Applies a payment event to the order row.

        deposit_paid and full_paid move a not-yet-processing order to processing;
        escrow_hold only touches the payment status. This path bypasses the
        transition tables and can never put an order into a void state.
        """
        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            raise OrderNotFound(order_id)

        stored_status = order.status
        current_status = normalize_status(stored_status)
        now = datetime.now(timezone.utc)
        values = {"updated_at": now}
        if transaction_id:
            values["transaction_id"] = transaction_id

        if event is PaymentEvent.DEPOSIT_PAID:
            values.update(deposit_paid_at=now, payment_status="deposit_paid")
        elif event is PaymentEvent.FULL_PAID:
            # Full payment is held in escrow until delivery
            values.update(full_payment_paid_at=now, payment_status="escrow_hold")
        else:
            values.update(payment_status="escrow_hold")

        moves_fulfillment = (
            event in (PaymentEvent.DEPOSIT_PAID, PaymentEvent.FULL_PAID)
            and current_status in PRE_PROCESSING_STATUSES
        )
        if moves_fulfillment:
            values["status"] = OrderStatus.PROCESSING.value
        elif is_void(current_status):
            logger.warning("payment_for_void_order", order_id=order_id, event=event.value,
                           status=current_status.value)

        try:
            if not await PaymentRepository.apply_payment_update(db, order_id, stored_status, values):
                raise ConcurrentUpdateConflict(order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(order)
        ecomm_payment_events_total.labels(event=event.value).inc()
        logger.info(
            "payment_event_applied",
            order_id=order_id,
            event=event.value,
            payment_status=values["payment_status"],
            status=order.status,
        )
        return order
