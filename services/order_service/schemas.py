from datetime import date, datetime
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .statuses import OrderStatus


class OrderSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    AMOUNT_DESC = "amount_desc"
    AMOUNT_ASC = "amount_asc"


class SupplierActionStatus(str, Enum):
    """What a supplier may ask for. Returns are operator-only."""

    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# --- Listing ---

class OrderListQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    search: Optional[str] = Field(default=None, max_length=200)
    status: Union[Literal["all"], OrderStatus] = "all"
    payment_status: str = "all"
    sort_by: OrderSort = OrderSort.NEWEST
    date_from: Optional[date] = Field(default=None, alias="from")
    date_to: Optional[date] = Field(default=None, alias="to")

    class Config:
        populate_by_name = True

    @field_validator("search", "payment_status", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class BuyerContact(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]


class OperatorOrderItem(BaseModel):
    id: int
    order_number: str
    created_at: datetime
    updated_at: datetime
    status: OrderStatus
    payment_status: str
    total_amount: float
    item_count: int
    supplier_names: List[str]
    buyer: BuyerContact
    available_next_statuses: List[OrderStatus]
    can_update: bool


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class StatusCounts(BaseModel):
    all: int = 0
    active: int = 0
    completed: int = 0
    cancelled: int = 0


class OperatorOrderPage(BaseModel):
    orders: List[OperatorOrderItem]
    pagination: Pagination
    counts: StatusCounts


class SupplierLineItem(BaseModel):
    id: int
    product_id: int
    name: str
    image: str
    quantity: int
    line_total: float
    unit_price: float


class SupplierBuyer(BuyerContact):
    address: str


class SupplierOrderView(BaseModel):
    id: int
    order_number: str
    created_at: datetime
    updated_at: datetime
    status: OrderStatus
    payment_status: str
    payment_method: Optional[str]
    total_amount: float
    seller_subtotal: float
    seller_items_count: int
    can_manage_status: bool
    contains_other_suppliers: bool
    available_next_statuses: List[OrderStatus]
    buyer: SupplierBuyer
    line_items: List[SupplierLineItem]


# --- Status updates ---

class OperatorStatusUpdate(BaseModel):
    next_status: OrderStatus
    note: Optional[str] = Field(default=None, max_length=300)

    @field_validator("note", mode="before")
    @classmethod
    def strip_note(cls, value):
        return value.strip() if isinstance(value, str) else value


class OperatorStatusUpdateResponse(BaseModel):
    order_id: int
    order_number: str
    previous_status: OrderStatus
    status: OrderStatus
    updated_at: datetime
    restocked: bool
    notes: Optional[str] = None


class SupplierStatusUpdate(BaseModel):
    next_status: SupplierActionStatus
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)


class OrderStatusView(BaseModel):
    id: int
    status: OrderStatus
    updated_at: datetime
    cancellation_reason: Optional[str]
    cancelled_at: Optional[datetime]


class SupplierStatusUpdateResponse(BaseModel):
    success: bool = True
    order: OrderStatusView


class BuyerStatusUpdate(BaseModel):
    """Buyers can only cancel; everything else is driven by the seller."""

    next_status: Literal["cancelled"] = "cancelled"
    reason: Optional[str] = Field(default=None, max_length=500)


class BuyerStatusUpdateResponse(BaseModel):
    success: bool = True
    order: OrderStatusView
    refund_summary: str
