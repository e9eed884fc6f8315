from sqlalchemy.ext.asyncio import AsyncSession
from .models import Notification

class NotificationRepository:
    @staticmethod
    async def create_notification(db: AsyncSession, notification: Notification):
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        return notification
