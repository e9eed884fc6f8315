from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActorRole(str, Enum):
    OPERATOR = "operator"
    SUPPLIER = "supplier"
    BUYER = "buyer"


@dataclass(frozen=True)
class Actor:
    """Whoever is asking to read or move an order.

    Operators act platform-wide. Suppliers act only through the supplier
    account their token is bound to. A buyer token carries the buyer id as
    its subject and reaches only that buyer's own orders.
    """

    user_id: str
    role: ActorRole
    supplier_id: Optional[int] = None

    @property
    def is_operator(self) -> bool:
        return self.role is ActorRole.OPERATOR
