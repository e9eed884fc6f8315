from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product


class ProductRepository:

    @staticmethod
    async def restore_stock(db: AsyncSession, product_id: int, quantity: int) -> bool:
        """Relative increment so concurrent restocks from other orders never overwrite each other.

        Runs inside the caller's transaction; the caller commits.
        """
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(
                stock=func.coalesce(Product.stock, 0) + quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
