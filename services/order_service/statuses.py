"""Canonical fulfillment statuses and who may move an order between them.

Orders can carry legacy or externally sourced status strings, so every read
goes through `normalize_status` before any comparison. The transition tables
are plain data keyed by role so they can be enumerated exhaustively.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from shared.config.settings import ORDER_NUMBER_PREFIX
from shared.security.actors import ActorRole


class OrderStatus(str, Enum):
    PENDING = "pending"
    PLACED = "placed"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


VOID_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.RETURNED})

# Listing tabs; disjoint and together cover every status
ACTIVE_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PLACED,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
})
COMPLETED_STATUSES = frozenset({OrderStatus.DELIVERED})
CANCELLED_STATUSES = VOID_STATUSES

STATUS_GROUPS = {
    "active": ACTIVE_STATUSES,
    "completed": COMPLETED_STATUSES,
    "cancelled": CANCELLED_STATUSES,
}

LEGACY_STATUS_ALIASES = {
    "in_progress": OrderStatus.PROCESSING,
    "completed": OrderStatus.DELIVERED,
    "complete": OrderStatus.DELIVERED,
    "refund_processed": OrderStatus.RETURNED,
}

_S = OrderStatus

OPERATOR_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    _S.PENDING: (_S.PLACED, _S.CONFIRMED, _S.PROCESSING, _S.CANCELLED),
    _S.PLACED: (_S.CONFIRMED, _S.PROCESSING, _S.CANCELLED),
    _S.CONFIRMED: (_S.PROCESSING, _S.SHIPPED, _S.CANCELLED),
    _S.PROCESSING: (_S.SHIPPED, _S.OUT_FOR_DELIVERY, _S.CANCELLED),
    _S.SHIPPED: (_S.OUT_FOR_DELIVERY, _S.DELIVERED, _S.CANCELLED, _S.RETURNED),
    _S.OUT_FOR_DELIVERY: (_S.DELIVERED, _S.CANCELLED, _S.RETURNED),
    _S.DELIVERED: (_S.RETURNED,),
    _S.CANCELLED: (),
    _S.RETURNED: (),
}

# Suppliers never issue returns and cannot cancel once shipped
SUPPLIER_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    _S.PENDING: (_S.CONFIRMED, _S.CANCELLED),
    _S.PLACED: (_S.CONFIRMED, _S.CANCELLED),
    _S.CONFIRMED: (_S.PROCESSING, _S.CANCELLED),
    _S.PROCESSING: (_S.SHIPPED, _S.CANCELLED),
    _S.SHIPPED: (_S.OUT_FOR_DELIVERY, _S.DELIVERED),
    _S.OUT_FOR_DELIVERY: (_S.DELIVERED,),
    _S.DELIVERED: (),
    _S.CANCELLED: (),
    _S.RETURNED: (),
}

# Buyers can only withdraw an order that has not left the warehouse
BUYER_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    _S.PENDING: (_S.CANCELLED,),
    _S.PLACED: (_S.CANCELLED,),
    _S.CONFIRMED: (_S.CANCELLED,),
    _S.PROCESSING: (_S.CANCELLED,),
    _S.SHIPPED: (),
    _S.OUT_FOR_DELIVERY: (),
    _S.DELIVERED: (),
    _S.CANCELLED: (),
    _S.RETURNED: (),
}

TRANSITION_TABLES = {
    ActorRole.OPERATOR: OPERATOR_TRANSITIONS,
    ActorRole.SUPPLIER: SUPPLIER_TRANSITIONS,
    ActorRole.BUYER: BUYER_TRANSITIONS,
}


def normalize_status(raw: Optional[str]) -> OrderStatus:
    value = (raw or "").strip().lower()
    try:
        return OrderStatus(value)
    except ValueError:
        return LEGACY_STATUS_ALIASES.get(value, OrderStatus.PENDING)


def allowed_next(role: ActorRole, status: OrderStatus) -> tuple[OrderStatus, ...]:
    return TRANSITION_TABLES[role].get(status, ())


def is_void(status: OrderStatus) -> bool:
    return status in VOID_STATUSES


def should_reconcile(current: OrderStatus, next_status: OrderStatus) -> bool:
    """Stock goes back only on the first entry into a void state."""
    return is_void(next_status) and not is_void(current)


def format_order_number(order_id: int, created_at: Optional[datetime]) -> str:
    year = (created_at or datetime.now(timezone.utc)).year
    return f"{ORDER_NUMBER_PREFIX}-{year}-{order_id:04d}"
