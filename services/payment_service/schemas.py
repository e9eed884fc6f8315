from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PaymentEvent(str, Enum):
    DEPOSIT_PAID = "deposit_paid"
    FULL_PAID = "full_paid"
    ESCROW_HOLD = "escrow_hold"


class PaymentEventCreate(BaseModel):
    status: PaymentEvent
    transaction_id: Optional[str] = Field(default=None, max_length=255)


class PaymentOrderResponse(BaseModel):
    id: int
    status: str
    payment_status: str
    payment_method: Optional[str]
    transaction_id: Optional[str]
    total_amount: float
    deposit_amount: Optional[float]
    balance_due: Optional[float]
    deposit_paid_at: Optional[datetime]
    full_payment_paid_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
