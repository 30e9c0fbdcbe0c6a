# storefront/domain/snapshot.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Tuple


@dataclass(frozen=True)
class ResolvedLine:
    cart_item_id: int
    variant_id: int
    requested_quantity: int
    available_quantity: int
    unit_price: Decimal
    product_name: str
    size: str

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.requested_quantity


@dataclass(frozen=True)
class CartSnapshot:
    """
    Wyceniony i sprawdzony stan wybranych pozycji koszyka tuz przed zamowieniem.
    Stan magazynu jest tu tylko informacyjny, commit czyta go ponownie pod lockiem.
    """

    account_id: int
    lines: Tuple[ResolvedLine, ...]
    total_quantity: int
    subtotal: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    cart_item_ids: Tuple[int, ...] = field(default=())

    def as_summary(self, note: str | None = None) -> dict:
        """Plain-JSON summary used by the order confirmation."""
        return {
            "items": [
                {
                    "product_name": line.product_name,
                    "size": line.size,
                    "quantity": line.requested_quantity,
                    "price": str(line.unit_price),
                }
                for line in self.lines
            ],
            "total_quantity": self.total_quantity,
            "subtotal": str(self.subtotal),
            "delivery_fee": str(self.delivery_fee),
            "total_amount": str(self.total_amount),
            "note": note,
        }


def compute_delivery_fee(total_quantity: int, base_fee: Decimal, extra_unit_fee: Decimal) -> Decimal:
    """Base fee for the first unit plus a flat fee for every extra unit."""
    if total_quantity <= 0:
        return Decimal("0.00")
    return (base_fee + (total_quantity - 1) * extra_unit_fee).quantize(Decimal("0.01"))
