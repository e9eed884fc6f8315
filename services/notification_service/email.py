from html import escape
from typing import Optional

import httpx
import structlog

from shared.config.settings import (
    EMAIL_API_KEY,
    EMAIL_API_URL,
    EMAIL_FROM,
    EMAIL_TIMEOUT_SECONDS,
)
from services.order_service.statuses import OrderStatus

logger = structlog.get_logger(__name__)

REFUND_SUMMARY = "Refunds will be processed to the original payment method."


def build_status_email(name: str, order_number: str, status: OrderStatus, order_link: str,
                       refund_summary: Optional[str] = None) -> tuple[str, str]:
    """Subject and HTML body for a buyer-facing status change."""
    name = escape(name or "there")
    if status is OrderStatus.CANCELLED:
        subject = f"Your order {order_number} has been cancelled"
        html = (
            f"<h2>Order cancelled</h2>"
            f"<p>Hello {name},</p>"
            f"<p>Your order <strong>{order_number}</strong> has been cancelled.</p>"
            f"<p>{escape(refund_summary or REFUND_SUMMARY)}</p>"
            f"<p>Refunds are processed to the original payment method within 3-5 business days.</p>"
        )
        return subject, html

    subject = f"Your order {order_number} is {status.label}"
    html = (
        f"<h2>Order update</h2>"
        f"<p>Hello {name},</p>"
        f"<p>Your order <strong>{order_number}</strong> is now <strong>{status.label}</strong>.</p>"
        f'<p><a href="{order_link}">View your order</a></p>'
    )
    return subject, html


class EmailSender:
    """Posts mail to the configured HTTP mail API. Without one, mail is only logged."""

    def __init__(self, api_url: str = EMAIL_API_URL, api_key: str = EMAIL_API_KEY,
                 sender: str = EMAIL_FROM, timeout: float = EMAIL_TIMEOUT_SECONDS):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_url:
            logger.info("email_debug", to=to, subject=subject)
            return

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        payload = {"from": self.sender, "to": to, "subject": subject, "html": html}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(self.api_url, json=payload, headers=headers)
            resp.raise_for_status()
        logger.info("email_sent", to=to, subject=subject)
