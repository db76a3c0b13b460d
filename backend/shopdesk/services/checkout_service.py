# Overview: Commit the cart into a Sale and apply stock and receivables side effects.

"""
Checkout

WHY: A sale must hit stock, the client's balance and the sales history
exactly once. All three replacement collections are computed up front and
saved in one commit, so a rejected checkout touches nothing.

STEPS:
1. CASH with paid < total -> InsufficientPayment (nothing touched)
2. change = paid - total for CASH, 0 otherwise
3. Sale snapshot (items, client name as of now)
4. stock -= line quantity for each line. Lines whose product is no longer
   in the catalog are skipped. Stock may go negative.
5. DEBT: client balance -= total
6. Sale appended to the history
7. Cart cleared
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..records import PaymentMethod, Sale
from ..time_utils import utcnow
from .cart_service import CartAggregator


logger = logging.getLogger(__name__)

# Client name recorded when the selected client cannot be found
FALLBACK_CLIENT_NAME = "NI"


class CheckoutError(Exception):
    """Raised for checkout errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientPayment(CheckoutError):
    """Cash tendered is less than the cart total."""
    pass


def parse_payment_method(value) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in PaymentMethod.__members__:
            return PaymentMethod[key]
        for method in PaymentMethod:
            if method.label.lower() == value.strip().lower():
                return method
    raise CheckoutError(
        "Invalid payment method",
        details={"allowed": [m.value for m in PaymentMethod]},
    )


class CheckoutProcessor:
    def __init__(self, context, clock=utcnow):
        self.context = context
        self.clock = clock

    def commit(
        self,
        cart: CartAggregator,
        client_id: str,
        method: PaymentMethod,
        paid_amount_cents: int = 0,
    ) -> Sale:
        catalog = self.context.catalog
        ledger = self.context.ledger

        if cart.is_empty():
            raise CheckoutError("Cannot check out an empty cart")

        total = cart.total()
        paid_amount_cents = paid_amount_cents or 0

        if method == PaymentMethod.CASH and paid_amount_cents < total:
            raise InsufficientPayment(
                "Insufficient payment",
                details={"total_cents": total, "paid_cents": paid_amount_cents, "missing_cents": total - paid_amount_cents},
            )

        client = ledger.find_client(client_id)
        if method == PaymentMethod.DEBT:
            if client is None:
                raise CheckoutError("Client not found", details={"client_id": client_id})
            if client.id == self.context.unidentified_client_id:
                raise CheckoutError("Crediário requires an identified client", details={"client_id": client_id})

        change = paid_amount_cents - total if method == PaymentMethod.CASH else 0
        items = tuple(cart.items())

        sale = Sale(
            id=ledger.new_sale_id(),
            date=self.clock(),
            client_id=client_id,
            client_name=client.name if client else FALLBACK_CLIENT_NAME,
            items=items,
            total_cents=total,
            payment_method=method,
            amount_paid_cents=paid_amount_cents,
            change_cents=change,
        )

        sold: dict[str, float] = {}
        for item in items:
            sold[item.product_id] = sold.get(item.product_id, 0) + item.quantity

        products = []
        for product in catalog.products():
            quantity = sold.get(product.id)
            if quantity is None:
                products.append(product)
                continue
            product = replace(product, stock=product.stock - quantity)
            if product.stock < 0:
                logger.warning("Product %s (%r) stock is now negative: %s", product.id, product.name, product.stock)
            products.append(product)

        changes = {
            "products": products,
            "sales": ledger.sales() + [sale],
        }
        if method == PaymentMethod.DEBT:
            changes["clients"] = [
                replace(c, balance_cents=c.balance_cents - total) if c.id == client.id else c
                for c in ledger.clients()
            ]

        self.context.commit(**changes)
        cart.clear()

        logger.info(
            "Sale %s committed: %s %s, total=%d change=%d",
            sale.id, method.value, client_id, total, change,
        )
        return sale


def checkout(context, method: PaymentMethod, paid_amount_cents: Optional[int] = 0, clock=utcnow) -> Sale:
    """Check out the operator's cart for the selected client, then reset the client."""
    pos = context.pos
    sale = CheckoutProcessor(context, clock=clock).commit(
        pos.cart,
        pos.selected_client_id,
        method,
        paid_amount_cents or 0,
    )
    pos.reset_client()
    return sale
