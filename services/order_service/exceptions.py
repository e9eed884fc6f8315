"""Order domain exceptions.

Raised by the service layer; the routers translate them into HTTP responses.
"""


class OrderError(Exception):
    """Base class for order lifecycle failures."""


class OrderNotFound(OrderError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("Order not found")


class OrderAccessDenied(OrderError):
    """The actor has no right to manage the order. Deliberately says nothing about it."""

    def __init__(self, message: str = "You are not authorized to manage this order"):
        super().__init__(message)


class MultiSupplierOrder(OrderAccessDenied):
    def __init__(self):
        super().__init__(
            "This order contains multiple suppliers. "
            "Seller-side status update is disabled for this order."
        )


class IllegalTransition(OrderError):
    def __init__(self, current_status: str, next_status: str):
        self.current_status = current_status
        self.next_status = next_status
        super().__init__(f'Invalid status transition from "{current_status}" to "{next_status}"')


class ConcurrentUpdateConflict(OrderError):
    """The guarded write matched no row: another request moved the order first. Safe to retry."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("Order was updated by another request, reload and retry")
