"""Order listings for operators and for a single supplier.

The operator listing runs one predicate set twice: with the status filter for
the page and its total, without it for the per-status tab counts. Both come
from `build_order_filters`, so the badges always reflect the active search,
date range and payment filter.
"""
import math
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.observability import ecomm_order_listing_duration_seconds
from shared.security.actors import ActorRole
from services.customer_service.models import Address, Buyer
from services.inventory_service.models import Product, Supplier
from .composition import resolve_compositions
from .models import Order, OrderItem
from .schemas import (
    BuyerContact,
    OperatorOrderItem,
    OperatorOrderPage,
    OrderListQuery,
    OrderSort,
    Pagination,
    StatusCounts,
    SupplierBuyer,
    SupplierLineItem,
    SupplierOrderView,
)
from .statuses import (
    LEGACY_STATUS_ALIASES,
    STATUS_GROUPS,
    OrderStatus,
    allowed_next,
    format_order_number,
    normalize_status,
)

NO_ADDRESS = "No default address available"
UNKNOWN_SUPPLIER = "Unknown supplier"


def normalized_status_expr(column=Order.status):
    """SQL twin of `normalize_status`, for filtering and searching in the database."""
    lowered = func.lower(func.trim(column))
    return case(
        (lowered.in_([status.value for status in OrderStatus]), lowered),
        *[(lowered == alias, target.value) for alias, target in LEGACY_STATUS_ALIASES.items()],
        else_=OrderStatus.PENDING.value,
    )


def _like_pattern(search: str) -> str:
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _start_of_day(day) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def build_order_filters(query: OrderListQuery, include_status: bool) -> list:
    clauses = []

    if query.search:
        pattern = _like_pattern(query.search)
        clauses.append(or_(
            Buyer.name.ilike(pattern, escape="\\"),
            Buyer.email.ilike(pattern, escape="\\"),
            Buyer.phone_number.ilike(pattern, escape="\\"),
            normalized_status_expr().ilike(pattern, escape="\\"),
            cast(Order.id, String).ilike(pattern, escape="\\"),
        ))

    if query.date_from:
        clauses.append(Order.created_at >= _start_of_day(query.date_from))

    if query.date_to:
        # `to` covers the whole day
        clauses.append(Order.created_at < _start_of_day(query.date_to) + timedelta(days=1))

    if query.payment_status and query.payment_status != "all":
        clauses.append(Order.payment_status == query.payment_status)

    if include_status and query.status != "all":
        clauses.append(normalized_status_expr() == OrderStatus(query.status).value)

    return clauses


def _sort_columns(sort_by: OrderSort) -> tuple:
    if sort_by is OrderSort.OLDEST:
        return (Order.created_at.asc(), Order.id.asc())
    if sort_by is OrderSort.AMOUNT_ASC:
        return (Order.total_amount.asc(), Order.created_at.desc(), Order.id.desc())
    if sort_by is OrderSort.AMOUNT_DESC:
        return (Order.total_amount.desc(), Order.created_at.desc(), Order.id.desc())
    return (Order.created_at.desc(), Order.id.desc())


def supplier_label(name: Optional[str], supplier_id: Optional[int]) -> str:
    if name:
        return name
    if supplier_id is not None:
        return f"Supplier #{supplier_id}"
    return UNKNOWN_SUPPLIER


def summarize_counts(status_rows) -> StatusCounts:
    """Folds raw (stored status, count) rows into the listing tabs."""
    per_status: dict[OrderStatus, int] = {}
    for raw_status, count in status_rows:
        status = normalize_status(raw_status)
        # Several legacy spellings can land on the same canonical status
        per_status[status] = per_status.get(status, 0) + int(count or 0)

    groups = {
        name: sum(per_status.get(status, 0) for status in members)
        for name, members in STATUS_GROUPS.items()
    }
    return StatusCounts(all=sum(per_status.values()), **groups)


def format_address(address: Optional[Address]) -> str:
    if address is None:
        return NO_ADDRESS
    parts = [address.name, address.address, address.city, address.postcode, address.phone]
    return ", ".join(part for part in parts if part) or NO_ADDRESS


class OrderQueryService:

    @staticmethod
    async def list_operator_orders(db: AsyncSession, query: OrderListQuery) -> OperatorOrderPage:
        with ecomm_order_listing_duration_seconds.labels(audience="operator").time():
            with_status = build_order_filters(query, include_status=True)
            without_status = build_order_filters(query, include_status=False)

            offset = (query.page - 1) * query.limit
            list_result = await db.execute(
                select(
                    Order.id,
                    Order.created_at,
                    Order.updated_at,
                    Order.status,
                    Order.payment_status,
                    Order.total_amount,
                    Buyer.id.label("buyer_id"),
                    Buyer.name.label("buyer_name"),
                    Buyer.email.label("buyer_email"),
                    Buyer.phone_number.label("buyer_phone"),
                )
                .join(Buyer, Order.buyer_id == Buyer.id)
                .where(*with_status)
                .order_by(*_sort_columns(query.sort_by))
                .limit(query.limit)
                .offset(offset)
            )
            rows = list_result.all()

            total = await db.scalar(
                select(func.count(Order.id))
                .join(Buyer, Order.buyer_id == Buyer.id)
                .where(*with_status)
            )

            status_result = await db.execute(
                select(Order.status, func.count(Order.id))
                .join(Buyer, Order.buyer_id == Buyer.id)
                .where(*without_status)
                .group_by(Order.status)
            )
            counts = summarize_counts(status_result.all())

            summaries = await OrderQueryService._item_summaries(db, [row.id for row in rows])

            orders = []
            for row in rows:
                status = normalize_status(row.status)
                item_count, supplier_names = summaries.get(row.id, (0, []))
                next_statuses = list(allowed_next(ActorRole.OPERATOR, status))
                created_at = row.created_at or datetime.now(timezone.utc)
                orders.append(OperatorOrderItem(
                    id=row.id,
                    order_number=format_order_number(row.id, row.created_at),
                    created_at=created_at,
                    updated_at=row.updated_at or created_at,
                    status=status,
                    payment_status=row.payment_status,
                    total_amount=row.total_amount or 0,
                    item_count=item_count,
                    supplier_names=supplier_names,
                    buyer=BuyerContact(
                        id=row.buyer_id,
                        name=row.buyer_name,
                        email=row.buyer_email,
                        phone=row.buyer_phone,
                    ),
                    available_next_statuses=next_statuses,
                    can_update=bool(next_statuses),
                ))

        total = int(total or 0)
        return OperatorOrderPage(
            orders=orders,
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=total,
                total_pages=max(1, math.ceil(total / query.limit)),
            ),
            counts=counts,
        )

    @staticmethod
    async def _item_summaries(db: AsyncSession, order_ids: list[int]) -> dict[int, tuple[int, list[str]]]:
        """Item count and supplier labels for a page of orders, in one query."""
        if not order_ids:
            return {}

        supplier_key = func.coalesce(OrderItem.supplier_id, Product.supplier_id)
        result = await db.execute(
            select(OrderItem.order_id, OrderItem.quantity, supplier_key.label("supplier_id"), Supplier.name)
            .join(Product, OrderItem.product_id == Product.id)
            .outerjoin(Supplier, Supplier.id == supplier_key)
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.id)
        )

        counts: dict[int, int] = {}
        labels: dict[int, dict[str, None]] = {}
        for order_id, quantity, supplier_id, supplier_name in result.all():
            counts[order_id] = counts.get(order_id, 0) + int(quantity or 0)
            labels.setdefault(order_id, {})[supplier_label(supplier_name, supplier_id)] = None

        return {order_id: (counts[order_id], list(labels[order_id])) for order_id in counts}

    @staticmethod
    async def list_supplier_orders(db: AsyncSession, supplier_id: int) -> list[SupplierOrderView]:
        """Every order touching the supplier's products, newest first, one entry per order."""
        with ecomm_order_listing_duration_seconds.labels(audience="supplier").time():
            result = await db.execute(
                select(
                    Order.id.label("order_id"),
                    Order.created_at,
                    Order.updated_at,
                    Order.status,
                    Order.payment_status,
                    Order.payment_method,
                    Order.total_amount,
                    Buyer.id.label("buyer_id"),
                    Buyer.name.label("buyer_name"),
                    Buyer.email.label("buyer_email"),
                    Buyer.phone_number.label("buyer_phone"),
                    OrderItem.id.label("item_id"),
                    OrderItem.quantity,
                    OrderItem.price.label("line_total"),
                    Product.id.label("product_id"),
                    Product.name.label("product_name"),
                    Product.images,
                )
                .select_from(OrderItem)
                .join(Order, OrderItem.order_id == Order.id)
                .join(Product, OrderItem.product_id == Product.id)
                .join(Buyer, Order.buyer_id == Buyer.id)
                .where(Product.supplier_id == supplier_id)
                .order_by(Order.created_at.desc(), Order.id.desc(), OrderItem.id)
            )
            rows = result.all()
            if not rows:
                return []

            grouped: dict[int, dict] = {}
            for row in rows:
                entry = grouped.get(row.order_id)
                if entry is None:
                    entry = {
                        "row": row,
                        "subtotal": Decimal("0"),
                        "items_count": 0,
                        "line_items": [],
                    }
                    grouped[row.order_id] = entry

                line_total = Decimal(row.line_total or 0)
                quantity = int(row.quantity or 0)
                images = row.images if isinstance(row.images, list) else []
                entry["line_items"].append(SupplierLineItem(
                    id=row.item_id,
                    product_id=row.product_id,
                    name=row.product_name,
                    image=images[0] if images else "",
                    quantity=quantity,
                    line_total=line_total,
                    unit_price=line_total / quantity if quantity > 0 else line_total,
                ))
                entry["subtotal"] += line_total
                entry["items_count"] += quantity

            compositions = await resolve_compositions(db, grouped.keys())
            addresses = await OrderQueryService._default_addresses(
                db, {entry["row"].buyer_id for entry in grouped.values()}
            )

            views = []
            for order_id, entry in grouped.items():
                row = entry["row"]
                status = normalize_status(row.status)
                composition = compositions.get(order_id)
                can_manage = composition is not None and composition.can_be_managed_by(supplier_id)
                created_at = row.created_at or datetime.now(timezone.utc)
                views.append(SupplierOrderView(
                    id=order_id,
                    order_number=format_order_number(order_id, row.created_at),
                    created_at=created_at,
                    updated_at=row.updated_at or created_at,
                    status=status,
                    payment_status=row.payment_status,
                    payment_method=row.payment_method,
                    total_amount=row.total_amount or 0,
                    seller_subtotal=entry["subtotal"],
                    seller_items_count=entry["items_count"],
                    can_manage_status=can_manage,
                    contains_other_suppliers=(
                        composition is not None and composition.contains_other_suppliers(supplier_id)
                    ),
                    available_next_statuses=list(allowed_next(ActorRole.SUPPLIER, status)) if can_manage else [],
                    buyer=SupplierBuyer(
                        id=row.buyer_id,
                        name=row.buyer_name,
                        email=row.buyer_email,
                        phone=row.buyer_phone,
                        address=format_address(addresses.get(row.buyer_id)),
                    ),
                    line_items=entry["line_items"],
                ))

        return views

    @staticmethod
    async def _default_addresses(db: AsyncSession, buyer_ids: set[int]) -> dict[int, Address]:
        if not buyer_ids:
            return {}
        result = await db.execute(
            select(Address)
            .where(Address.buyer_id.in_(buyer_ids), Address.is_default.is_(True))
            .order_by(Address.id)
        )
        addresses: dict[int, Address] = {}
        for address in result.scalars().all():
            # First default wins when a buyer has several
            addresses.setdefault(address.buyer_id, address)
        return addresses
