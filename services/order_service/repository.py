from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select, update
from .models import Order, OrderItem

class OrderRepository:

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int):
        """Loads the order together with its buyer, always from the current row."""
        result = await db.execute(
            select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def apply_status(db: AsyncSession, order_id: int, expected_status: str, values: dict) -> bool:
        """Compare-and-swap status write.

        Only succeeds while the stored status is still the one read before validation,
        so two racing requests cannot both apply a transition. Returns False when no
        row matched. Does not commit.
        """
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def sum_quantities_by_product(db: AsyncSession, order_id: int) -> dict[int, int]:
        result = await db.execute(
            select(OrderItem.product_id, func.sum(OrderItem.quantity))
            .where(OrderItem.order_id == order_id)
            .group_by(OrderItem.product_id)
        )
        return {product_id: int(quantity or 0) for product_id, quantity in result.all()}
