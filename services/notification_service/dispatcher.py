import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from shared.config.database import AsyncSessionLocal
from shared.observability import ecomm_notification_failures_total
from services.order_service.statuses import OrderStatus
from .email import EmailSender, build_status_email
from .models import Notification
from .repository import NotificationRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StatusNotification:
    """What the buyer is told after a committed status change."""

    order_id: int
    order_number: str
    status: OrderStatus
    buyer_id: int
    buyer_name: str
    buyer_email: str
    refund_summary: Optional[str] = None

    @property
    def link(self) -> str:
        return f"/buyer/orders/{self.order_id}"

    @property
    def message(self) -> str:
        return f"Your order {self.order_number} is now {self.status.label}."


class NotificationDispatcher:
    """Best-effort fan-out after commit.

    Runs outside the order's transaction with its own session. Each channel fails
    on its own: errors are logged and counted, never retried or raised.
    """

    def __init__(self, session_factory=AsyncSessionLocal, email_sender: EmailSender | None = None):
        self.session_factory = session_factory
        self.email_sender = email_sender or EmailSender()

    async def dispatch_status_change(self, notification: StatusNotification) -> None:
        await asyncio.gather(
            self._notify_in_app(notification),
            self._send_email(notification),
        )

    async def _notify_in_app(self, notification: StatusNotification) -> None:
        try:
            async with self.session_factory() as db:
                await NotificationRepository.create_notification(
                    db,
                    Notification(
                        user_id=notification.buyer_id,
                        title="Order status updated",
                        message=notification.message,
                        type="order_status",
                        link=notification.link,
                    ),
                )
        except Exception:
            ecomm_notification_failures_total.labels(channel="in_app").inc()
            logger.exception("notification_insert_failed", order_id=notification.order_id)

    async def _send_email(self, notification: StatusNotification) -> None:
        try:
            subject, html = build_status_email(
                notification.buyer_name,
                notification.order_number,
                notification.status,
                notification.link,
                refund_summary=notification.refund_summary,
            )
            await self.email_sender.send(notification.buyer_email, subject, html)
        except Exception:
            ecomm_notification_failures_total.labels(channel="email").inc()
            logger.exception("status_email_failed", order_id=notification.order_id)


default_dispatcher = NotificationDispatcher()


def get_notification_dispatcher() -> NotificationDispatcher:
    return default_dispatcher
