from typing import Mapping

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from .repository import ProductRepository

logger = structlog.get_logger(__name__)


class InventoryService:

    @staticmethod
    async def restock(db: AsyncSession, quantities: Mapping[int, int]) -> dict[int, int]:
        """Returns voided quantities to stock, one increment per product.

        `quantities` must already be summed per product. Nothing is committed here:
        the increments belong to the transaction that voided the order.
        """
        restocked: dict[int, int] = {}
        for product_id, quantity in sorted(quantities.items()):
            if quantity <= 0:
                continue
            if await ProductRepository.restore_stock(db, product_id, quantity):
                restocked[product_id] = quantity
            else:
                logger.warning("restock_product_missing", product_id=product_id, quantity=quantity)
        return restocked
