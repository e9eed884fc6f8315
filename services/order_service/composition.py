"""Which suppliers an order spans, and what that means for each of them.

A supplier manages an order on its own only when every line item belongs to
it. On a mixed order each supplier sees just its own slice and the operator
has to move the order forward.
"""
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.inventory_service.models import Product
from .models import OrderItem


@dataclass(frozen=True)
class OrderComposition:
    order_id: int
    supplier_ids: frozenset[int]

    @property
    def is_single_supplier(self) -> bool:
        return len(self.supplier_ids) == 1

    def involves(self, supplier_id: int) -> bool:
        return supplier_id in self.supplier_ids

    def can_be_managed_by(self, supplier_id: int) -> bool:
        return self.is_single_supplier and supplier_id in self.supplier_ids

    def contains_other_suppliers(self, supplier_id: int) -> bool:
        return bool(self.supplier_ids - {supplier_id})


async def resolve_compositions(db: AsyncSession, order_ids: Iterable[int]) -> dict[int, OrderComposition]:
    """One query for all orders. Orders without line items are absent from the result."""
    order_ids = list(order_ids)
    if not order_ids:
        return {}

    result = await db.execute(
        select(OrderItem.order_id, Product.supplier_id)
        .join(Product, OrderItem.product_id == Product.id)
        .where(OrderItem.order_id.in_(order_ids))
    )

    supplier_map: dict[int, set[int]] = {}
    for order_id, supplier_id in result.all():
        suppliers = supplier_map.setdefault(order_id, set())
        # Products without an owner do not count as a party
        if supplier_id is not None:
            suppliers.add(supplier_id)

    return {
        order_id: OrderComposition(order_id=order_id, supplier_ids=frozenset(suppliers))
        for order_id, suppliers in supplier_map.items()
    }


async def resolve_composition(db: AsyncSession, order_id: int) -> OrderComposition | None:
    compositions = await resolve_compositions(db, [order_id])
    return compositions.get(order_id)
