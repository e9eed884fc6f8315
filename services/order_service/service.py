from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.observability import (
    ecomm_inventory_restocked_units_total,
    ecomm_order_transition_rejected_total,
    ecomm_order_transitions_total,
)
from shared.security.actors import Actor, ActorRole
from shared.security.sanitize import sanitize_text
from services.inventory_service.service import InventoryService
from services.notification_service.dispatcher import StatusNotification
from services.payment_service.refunds import build_refund_summary
from .composition import resolve_composition
from .exceptions import (
    ConcurrentUpdateConflict,
    IllegalTransition,
    MultiSupplierOrder,
    OrderAccessDenied,
    OrderNotFound,
)
from .repository import OrderRepository
from .statuses import (
    OrderStatus,
    allowed_next,
    format_order_number,
    normalize_status,
    should_reconcile,
)

logger = structlog.get_logger(__name__)

OPERATOR_CANCEL_REASON = "Cancelled by operator"
SUPPLIER_CANCEL_REASON = "Cancelled by seller"
BUYER_CANCEL_REASON = "Cancelled by buyer"
DEFAULT_RETURN_REASON = "Returned by operator"

DEFAULT_CANCEL_REASONS = {
    ActorRole.OPERATOR: OPERATOR_CANCEL_REASON,
    ActorRole.SUPPLIER: SUPPLIER_CANCEL_REASON,
    ActorRole.BUYER: BUYER_CANCEL_REASON,
}


@dataclass
class StatusTransition:
    order_id: int
    order_number: str
    previous_status: OrderStatus
    status: OrderStatus
    updated_at: datetime
    restocked: bool = False
    restocked_quantities: dict[int, int] = field(default_factory=dict)
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    notes: Optional[str] = None
    # Only for cancelled orders
    refund_summary: Optional[str] = None
    # Set only when the status actually changed; dispatched after commit
    notification: Optional[StatusNotification] = None


class OrderService:

    @staticmethod
    async def update_status(
        db: AsyncSession,
        actor: Actor,
        order_id: int,
        next_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> StatusTransition:
        """Validates and applies one status transition in a single transaction.

        Suppliers are checked against the order's composition before anything about
        the order is read; buyers may only touch orders they placed. Entering a void
        state for the first time puts the ordered quantities back into stock inside
        the same transaction. `reason` becomes the cancellation or return reason,
        and is appended to the order's notes on any other move. The returned
        notification must be dispatched by the caller once this has returned.
        """
        log = logger.bind(order_id=order_id, role=actor.role.value, next_status=next_status.value)

        if actor.role is ActorRole.SUPPLIER:
            await OrderService._authorize_supplier(db, actor, order_id)

        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            ecomm_order_transition_rejected_total.labels(reason="not_found").inc()
            if actor.is_operator:
                raise OrderNotFound(order_id)
            raise OrderAccessDenied()
        if actor.role is ActorRole.BUYER and not OrderService._placed_by(actor, order):
            ecomm_order_transition_rejected_total.labels(reason="unauthorized").inc()
            raise OrderAccessDenied()

        stored_status = order.status
        current_status = normalize_status(stored_status)
        order_number = format_order_number(order.id, order.created_at)

        if next_status == current_status:
            log.info("order_status_unchanged", status=current_status.value)
            return StatusTransition(
                order_id=order.id,
                order_number=order_number,
                previous_status=current_status,
                status=current_status,
                updated_at=order.updated_at or order.created_at,
                cancellation_reason=order.cancellation_reason,
                cancelled_at=order.cancelled_at,
                notes=order.notes,
                refund_summary=OrderService.refund_summary(order, current_status),
            )

        if next_status not in allowed_next(actor.role, current_status):
            ecomm_order_transition_rejected_total.labels(reason="illegal").inc()
            raise IllegalTransition(current_status.value, next_status.value)

        now = datetime.now(timezone.utc)
        values = {"status": next_status.value, "updated_at": now}
        cancellation_reason = order.cancellation_reason
        cancelled_at = order.cancelled_at
        notes = order.notes
        reason = sanitize_text(reason)
        if next_status is OrderStatus.CANCELLED:
            cancellation_reason = reason or DEFAULT_CANCEL_REASONS[actor.role]
            cancelled_at = now
            values.update(cancellation_reason=cancellation_reason, cancelled_at=cancelled_at)
        elif next_status is OrderStatus.RETURNED:
            cancellation_reason = reason or DEFAULT_RETURN_REASON
            values.update(cancellation_reason=cancellation_reason)
        elif reason:
            notes = f"{notes}\n{reason}" if notes else reason
            values.update(notes=notes)

        reconcile = should_reconcile(current_status, next_status)
        restocked_quantities: dict[int, int] = {}
        try:
            applied = await OrderRepository.apply_status(db, order.id, stored_status, values)
            if not applied:
                raise ConcurrentUpdateConflict(order.id)

            if reconcile:
                quantities = await OrderRepository.sum_quantities_by_product(db, order.id)
                restocked_quantities = await InventoryService.restock(db, quantities)

            await db.commit()
        except ConcurrentUpdateConflict:
            await db.rollback()
            ecomm_order_transition_rejected_total.labels(reason="conflict").inc()
            log.warning("order_status_conflict", expected_status=stored_status)
            raise
        except Exception:
            await db.rollback()
            log.exception("order_status_update_failed")
            raise

        ecomm_order_transitions_total.labels(role=actor.role.value, status=next_status.value).inc()
        if restocked_quantities:
            ecomm_inventory_restocked_units_total.inc(sum(restocked_quantities.values()))
        log.info(
            "order_status_updated",
            previous_status=current_status.value,
            restocked=reconcile,
            restocked_quantities=restocked_quantities,
        )

        refund_summary = OrderService.refund_summary(order, next_status)
        buyer = order.buyer
        notification = None
        if buyer is not None:
            notification = StatusNotification(
                order_id=order.id,
                order_number=order_number,
                status=next_status,
                buyer_id=buyer.id,
                buyer_name=buyer.name,
                buyer_email=buyer.email,
                refund_summary=refund_summary,
            )

        return StatusTransition(
            order_id=order.id,
            order_number=order_number,
            previous_status=current_status,
            status=next_status,
            updated_at=now,
            restocked=reconcile,
            restocked_quantities=restocked_quantities,
            cancellation_reason=cancellation_reason,
            cancelled_at=cancelled_at,
            notes=notes,
            refund_summary=refund_summary,
            notification=notification,
        )

    @staticmethod
    async def get_buyer_order(db: AsyncSession, actor: Actor, order_id: int):
        """The order as its buyer sees it. Someone else's order and a missing one look alike."""
        order = await OrderRepository.get_order(db, order_id)
        if order is None or not OrderService._placed_by(actor, order):
            raise OrderAccessDenied()
        return order

    @staticmethod
    def refund_summary(order, status: OrderStatus) -> Optional[str]:
        if status is not OrderStatus.CANCELLED:
            return None
        return build_refund_summary(order.payment_status, order.total_amount, order.deposit_amount)

    @staticmethod
    def _placed_by(actor: Actor, order) -> bool:
        return str(order.buyer_id) == actor.user_id

    @staticmethod
    async def _authorize_supplier(db: AsyncSession, actor: Actor, order_id: int) -> None:
        composition = await resolve_composition(db, order_id)
        if composition is None or not composition.involves(actor.supplier_id):
            ecomm_order_transition_rejected_total.labels(reason="unauthorized").inc()
            raise OrderAccessDenied()
        if not composition.can_be_managed_by(actor.supplier_id):
            ecomm_order_transition_rejected_total.labels(reason="unauthorized").inc()
            raise MultiSupplierOrder()
