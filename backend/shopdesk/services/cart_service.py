# Overview: In-progress sale lines and their computed total.

from __future__ import annotations

from ..money import multiply_cents
from ..records import CartItem, Product


class CartError(Exception):
    """Raised for invalid cart operations."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class CartAggregator:
    """
    Holds the in-progress sale.

    INVARIANTS:
    - At most one line per product id. Re-adding a product grows the existing
      line instead of appending a duplicate row.
    - A line's price is the snapshot taken when the product first entered the
      cart; later catalog price edits do not reprice it.
    - total() is always the sum of the line subtotals (computed, never cached).
    """

    def __init__(self):
        self._lines: list[CartItem] = []

    def add_item(self, product: Product, quantity: float = 1) -> CartItem:
        if quantity is None or quantity <= 0:
            raise CartError("quantity must be > 0", details={"product_id": product.id, "quantity": quantity})

        for index, line in enumerate(self._lines):
            if line.product_id == product.id:
                new_quantity = line.quantity + quantity
                updated = CartItem(
                    product_id=line.product_id,
                    name=line.name,
                    price_cents=line.price_cents,
                    cost_cents=line.cost_cents,
                    unit=line.unit,
                    barcode=line.barcode,
                    quantity=new_quantity,
                    subtotal_cents=multiply_cents(line.price_cents, new_quantity),
                )
                self._lines[index] = updated
                return updated

        line = CartItem(
            product_id=product.id,
            name=product.name,
            price_cents=product.price_cents,
            cost_cents=product.cost_cents,
            unit=product.unit,
            barcode=product.barcode,
            quantity=quantity,
            subtotal_cents=multiply_cents(product.price_cents, quantity),
        )
        self._lines.append(line)
        return line

    def remove_item(self, product_id: str) -> None:
        self._lines = [line for line in self._lines if line.product_id != product_id]

    def items(self) -> list[CartItem]:
        return list(self._lines)

    def total(self) -> int:
        return sum(line.subtotal_cents for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def clear(self) -> None:
        self._lines = []

    def to_dict(self) -> dict:
        return {
            "items": [line.to_dict() for line in self._lines],
            "total_cents": self.total(),
        }
