# Overview: Merge extracted invoice lines into the catalog and record the payable.

"""
Catalog Reconciliation

For each invoice item, in input order:
- MATCH: the first product (catalog order) whose lower-cased name contains
  the item name, or is contained by it. Cost is overwritten with the invoice
  cost; the invoice quantity is added to stock.
- NO MATCH: a new product with price = cost × 1.5, stock = quantity, unit
  "un", no barcode.

After the items, one unpaid StoreDebt for the invoice total is appended,
with the photographed invoice kept as proof.

NOT ATOMIC: every item is committed to the catalog before the next one is
examined. A failure part-way leaves the earlier items applied and writes no
payable. Ambiguous names are not detected; first match wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional, Sequence

from ..money import multiply_cents, to_cents
from ..records import Product, StoreDebt
from ..time_utils import utcnow
from .recognition_schemas import InvoiceData, InvoiceItem
from .recognition_service import RecognitionEmpty


logger = logging.getLogger(__name__)

# Sell price for products first seen on an invoice
INVOICE_MARKUP = Decimal("1.5")
UNDATED_INVOICE_LABEL = "Hoje"


@dataclass
class ReconciliationOutcome:
    updated: list[Product] = field(default_factory=list)
    created: list[Product] = field(default_factory=list)
    debt: Optional[StoreDebt] = None

    @property
    def item_count(self) -> int:
        return len(self.updated) + len(self.created)

    def to_dict(self) -> dict:
        return {
            "updated": [p.to_dict() for p in self.updated],
            "created": [p.to_dict() for p in self.created],
            "item_count": self.item_count,
            "debt": self.debt.to_dict() if self.debt else None,
        }


def find_matching_product(products: Sequence[Product], item_name: str) -> Optional[Product]:
    wanted = item_name.lower()
    for product in products:
        name = product.name.lower()
        if wanted in name or name in wanted:
            return product
    return None


def invoice_debt_title(invoice: InvoiceData) -> str:
    return f"Compra (Nota {invoice.date or UNDATED_INVOICE_LABEL})"


class CatalogReconciler:
    def __init__(self, catalog, ledger, clock=utcnow):
        self.catalog = catalog
        self.ledger = ledger
        self.clock = clock

    def reconcile(self, invoice: InvoiceData, proof_image: Optional[str] = None) -> ReconciliationOutcome:
        """
        Raises:
            RecognitionEmpty: the invoice has no items (nothing is written)
        """
        if not invoice.items:
            raise RecognitionEmpty("No items found on the invoice")

        outcome = ReconciliationOutcome()
        for item in invoice.items:
            product, created = self._apply_item(item)
            if created:
                outcome.created.append(product)
            else:
                outcome.updated.append(product)

        outcome.debt = self._append_payable(invoice, proof_image)
        logger.info(
            "Reconciled invoice %r: %d updated, %d created, payable %s",
            invoice.date,
            len(outcome.updated),
            len(outcome.created),
            outcome.debt.id,
        )
        return outcome

    def _apply_item(self, item: InvoiceItem) -> tuple[Product, bool]:
        products = self.catalog.products()
        cost_cents = to_cents(item.cost) or 0
        existing = find_matching_product(products, item.name)

        if existing:
            updated = replace(existing, cost_cents=cost_cents, stock=existing.stock + item.quantity)
            self.catalog.replace_products([updated if p.id == existing.id else p for p in products])
            return updated, False

        product = Product(
            id=self.catalog.new_id(),
            name=item.name,
            price_cents=multiply_cents(cost_cents, INVOICE_MARKUP),
            cost_cents=cost_cents,
            stock=item.quantity,
            unit="un",
            barcode=None,
        )
        self.catalog.replace_products(products + [product])
        return product, True

    def _append_payable(self, invoice: InvoiceData, proof_image: Optional[str]) -> StoreDebt:
        debt = StoreDebt(
            id=self.ledger.new_store_debt_id(),
            title=invoice_debt_title(invoice),
            amount_cents=to_cents(invoice.total) or 0,
            due_date=self.clock(),
            is_paid=False,
            is_recurring=False,
            proof_image=proof_image,
        )
        self.ledger.replace_store_debts(self.ledger.store_debts() + [debt])
        return debt
