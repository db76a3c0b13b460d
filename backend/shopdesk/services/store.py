# Overview: In-process owner of the four shop collections and the operator's POS session.

"""
Shop state

Store invariants (authoritative)

- Four collections: products, clients, sales, storeDebts.
- Each collection is loaded once per process (seeded when never saved) and
  served from memory as lists of frozen records.
- Mutations go through commit(): the complete replacement collections are
  handed to the persistence collaborator first and only swapped into memory
  once persistence succeeded. A failed save leaves memory untouched.
- A commit naming several collections is saved in one transaction.

CatalogStore and LedgerStore are thin views over the same ShopContext; the
context is created per Flask app (app.extensions["shopdesk"]) the same way
Flask-SQLAlchemy keeps per-app engines.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Sequence

from flask import current_app

from ..records import Client, Product, Sale, StoreDebt
from .cart_service import CartAggregator
from .capture_service import CaptureRegistry
from .document_service import RecordIdAllocator


COLLECTIONS = ("products", "clients", "sales", "storeDebts")

# Keyword name used by commit() -> persisted collection name
_COMMIT_KEYS = {
    "products": "products",
    "clients": "clients",
    "sales": "sales",
    "store_debts": "storeDebts",
}


def default_collections(unidentified_client_id: str, unidentified_client_name: str) -> dict[str, list]:
    """Initial data used when a collection has never been saved."""
    return {
        "products": [
            Product(id="1", name="Coca Cola 2L", price_cents=1200, cost_cents=750, stock=24, unit="un", barcode="7894900011517"),
            Product(id="2", name="Pão Francês (kg)", price_cents=1590, cost_cents=800, stock=50, unit="kg"),
            Product(id="3", name="Detergente Ypê", price_cents=299, cost_cents=180, stock=100, unit="un"),
        ],
        "clients": [
            Client(id=unidentified_client_id, name=unidentified_client_name, balance_cents=0),
            Client(id="1", name="João Silva", balance_cents=-5000, phone="1199999999", address="Rua A, 123", cpf="000.000.000-00"),
            Client(id="2", name="Maria Souza", balance_cents=0, phone="1188888888"),
        ],
        "sales": [],
        "storeDebts": [
            StoreDebt(id="1", title="DAS MEI", amount_cents=7600, due_date=datetime(2023, 11, 20), is_paid=False, is_recurring=True),
            StoreDebt(id="2", title="Luz (Enel)", amount_cents=25000, due_date=datetime(2023, 11, 15), is_paid=True, is_recurring=False),
        ],
    }


class StoreNotReadyError(Exception):
    """Raised when the shop state is used outside an initialized app."""
    pass


@dataclass
class PosSession:
    """The operator's in-progress sale: cart plus selected client."""
    cart: CartAggregator
    selected_client_id: str
    default_client_id: str = field(repr=False, default="0")

    def reset_client(self) -> None:
        self.selected_client_id = self.default_client_id


class CatalogStore:
    """Read snapshots and whole-collection replacement for products."""

    def __init__(self, context: "ShopContext"):
        self._context = context

    def products(self) -> list[Product]:
        return list(self._context.collection("products"))

    def find(self, product_id: str) -> Optional[Product]:
        for product in self._context.collection("products"):
            if product.id == product_id:
                return product
        return None

    def find_by_barcode(self, barcode: str) -> Optional[Product]:
        for product in self._context.collection("products"):
            if product.barcode and product.barcode == barcode:
                return product
        return None

    def replace_products(self, products: Sequence[Product]) -> None:
        self._context.commit(products=products)

    def new_id(self) -> str:
        return self._context.ids.next_id(p.id for p in self._context.collection("products"))


class LedgerStore:
    """Read snapshots and whole-collection replacement for clients, sales and store debts."""

    def __init__(self, context: "ShopContext"):
        self._context = context

    def clients(self) -> list[Client]:
        return list(self._context.collection("clients"))

    def sales(self) -> list[Sale]:
        return list(self._context.collection("sales"))

    def store_debts(self) -> list[StoreDebt]:
        return list(self._context.collection("storeDebts"))

    def find_client(self, client_id: str) -> Optional[Client]:
        for client in self._context.collection("clients"):
            if client.id == client_id:
                return client
        return None

    def find_store_debt(self, debt_id: str) -> Optional[StoreDebt]:
        for debt in self._context.collection("storeDebts"):
            if debt.id == debt_id:
                return debt
        return None

    def replace_clients(self, clients: Sequence[Client]) -> None:
        self._context.commit(clients=clients)

    def replace_sales(self, sales: Sequence[Sale]) -> None:
        self._context.commit(sales=sales)

    def replace_store_debts(self, store_debts: Sequence[StoreDebt]) -> None:
        self._context.commit(store_debts=store_debts)

    def new_client_id(self) -> str:
        return self._context.ids.next_id(c.id for c in self._context.collection("clients"))

    def new_sale_id(self) -> str:
        return self._context.ids.next_id(s.id for s in self._context.collection("sales"))

    def new_store_debt_id(self) -> str:
        return self._context.ids.next_id(d.id for d in self._context.collection("storeDebts"))


class ShopContext:
    def __init__(
        self,
        persistence,
        *,
        seed_defaults: bool = True,
        unidentified_client_id: str = "0",
        unidentified_client_name: str = "NI (Não Identificado)",
    ):
        self.persistence = persistence
        self.seed_defaults = seed_defaults
        self.unidentified_client_id = unidentified_client_id
        self.unidentified_client_name = unidentified_client_name

        self.ids = RecordIdAllocator()
        self.catalog = CatalogStore(self)
        self.ledger = LedgerStore(self)
        self.pos = PosSession(
            cart=CartAggregator(),
            selected_client_id=unidentified_client_id,
            default_client_id=unidentified_client_id,
        )
        self.captures = CaptureRegistry()
        self.operator_sessions: dict[str, datetime] = {}

        self._collections: dict[str, tuple] | None = None
        self._load_lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._collections is not None

    def load(self) -> None:
        """
        Read every collection from persistence. Collections that were never
        saved fall back to the seed defaults (or empty), and are written back
        immediately so the next start reads the same data.
        """
        with self._load_lock:
            if self._collections is not None:
                return
            defaults = default_collections(self.unidentified_client_id, self.unidentified_client_name)
            collections: dict[str, tuple] = {}
            missing: dict[str, list] = {}
            for name in COLLECTIONS:
                records = self.persistence.load(name)
                if records is None:
                    records = defaults[name] if self.seed_defaults else []
                    missing[name] = records
                collections[name] = tuple(records)

            if not any(c.id == self.unidentified_client_id for c in collections["clients"]):
                clients = (Client(id=self.unidentified_client_id, name=self.unidentified_client_name),) + collections["clients"]
                collections["clients"] = clients
                missing["clients"] = list(clients)

            if missing:
                self.persistence.save(missing)
            self._collections = collections

    def reload(self) -> None:
        self._collections = None
        self.load()

    def collection(self, name: str) -> tuple:
        if self._collections is None:
            self.load()
        return self._collections[name]

    def commit(self, **changes: Iterable) -> None:
        """
        Persist then publish complete replacement collections.

        Keyword names: products, clients, sales, store_debts.
        """
        if self._collections is None:
            self.load()
        replacements: dict[str, tuple] = {}
        for key, records in changes.items():
            if key not in _COMMIT_KEYS:
                raise ValueError(f"Unknown collection: {key}")
            replacements[_COMMIT_KEYS[key]] = tuple(records)
        if not replacements:
            return

        self.persistence.save({name: list(records) for name, records in replacements.items()})
        self._collections = {**self._collections, **replacements}


class ShopState:
    """Flask extension giving access to the per-app ShopContext."""

    def __init__(self, app=None, persistence=None):
        if app is not None:
            self.init_app(app, persistence)

    def init_app(self, app, persistence) -> None:
        app.extensions["shopdesk"] = ShopContext(
            persistence,
            seed_defaults=app.config.get("SEED_DEFAULTS", True),
            unidentified_client_id=app.config.get("UNIDENTIFIED_CLIENT_ID", "0"),
            unidentified_client_name=app.config.get("UNIDENTIFIED_CLIENT_NAME", "NI (Não Identificado)"),
        )

    @property
    def context(self) -> ShopContext:
        try:
            return current_app.extensions["shopdesk"]
        except KeyError:
            raise StoreNotReadyError("shop state not initialized for this app")

    @property
    def catalog(self) -> CatalogStore:
        return self.context.catalog

    @property
    def ledger(self) -> LedgerStore:
        return self.context.ledger

    @property
    def pos(self) -> PosSession:
        return self.context.pos

    @property
    def captures(self) -> CaptureRegistry:
        return self.context.captures
