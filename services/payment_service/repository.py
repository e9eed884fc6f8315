from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update

from services.order_service.models import Order

class PaymentRepository:
    @staticmethod
    async def apply_payment_update(db: AsyncSession, order_id: int, expected_status: str, values: dict) -> bool:
        """Guarded on the status read beforehand, like every other order write."""
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
