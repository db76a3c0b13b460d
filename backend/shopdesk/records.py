"""
Domain records for the four shop collections.

Records are frozen: stores hand out snapshots, and every mutation builds a
new record (dataclasses.replace) that is committed as part of a complete
replacement collection.

CartItem and Sale are snapshots by construction: a cart line copies the
product fields at insertion time and a Sale copies the cart lines and the
client's name at commit time. Later catalog or client edits never reach them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .time_utils import parse_iso_datetime, to_utc_z

UNITS = ("un", "kg")


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    DEBT = "DEBT"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.CASH: "Dinheiro",
            PaymentMethod.CARD: "Cartão",
            PaymentMethod.DEBT: "Crediário (Fiado)",
        }[self]


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price_cents: int
    cost_cents: int
    stock: float = 0
    unit: str = "un"
    barcode: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "stock": self.stock,
            "unit": self.unit,
            "barcode": self.barcode,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            price_cents=int(data["price_cents"]),
            cost_cents=int(data.get("cost_cents") or 0),
            stock=float(data.get("stock") or 0),
            unit=data.get("unit") or "un",
            barcode=data.get("barcode") or None,
        )


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    balance_cents: int = 0
    phone: Optional[str] = None
    cpf: Optional[str] = None
    address: Optional[str] = None

    @property
    def owes(self) -> bool:
        return self.balance_cents < 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "balance_cents": self.balance_cents,
            "phone": self.phone,
            "cpf": self.cpf,
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Client":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            balance_cents=int(data.get("balance_cents") or 0),
            phone=data.get("phone"),
            cpf=data.get("cpf"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class CartItem:
    """A cart line: product snapshot + quantity + fixed subtotal."""
    product_id: str
    name: str
    price_cents: int
    cost_cents: int
    unit: str
    barcode: Optional[str]
    quantity: float
    subtotal_cents: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "unit": self.unit,
            "barcode": self.barcode,
            "quantity": self.quantity,
            "subtotal_cents": self.subtotal_cents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        return cls(
            product_id=str(data["product_id"]),
            name=data["name"],
            price_cents=int(data["price_cents"]),
            cost_cents=int(data.get("cost_cents") or 0),
            unit=data.get("unit") or "un",
            barcode=data.get("barcode"),
            quantity=float(data["quantity"]),
            subtotal_cents=int(data["subtotal_cents"]),
        )


@dataclass(frozen=True)
class Sale:
    id: str
    date: datetime
    client_id: str
    client_name: str
    items: tuple[CartItem, ...]
    total_cents: int
    payment_method: PaymentMethod
    amount_paid_cents: int
    change_cents: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "client_id": self.client_id,
            "client_name": self.client_name,
            "items": [item.to_dict() for item in self.items],
            "total_cents": self.total_cents,
            "payment_method": self.payment_method.value,
            "payment_method_label": self.payment_method.label,
            "amount_paid_cents": self.amount_paid_cents,
            "change_cents": self.change_cents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        date = data["date"]
        if isinstance(date, str):
            date = parse_iso_datetime(date)
        return cls(
            id=str(data["id"]),
            date=date,
            client_id=str(data["client_id"]),
            client_name=data["client_name"],
            items=tuple(CartItem.from_dict(item) for item in data.get("items") or []),
            total_cents=int(data["total_cents"]),
            payment_method=PaymentMethod(data["payment_method"]),
            amount_paid_cents=int(data.get("amount_paid_cents") or 0),
            change_cents=int(data.get("change_cents") or 0),
        )


@dataclass(frozen=True)
class StoreDebt:
    """A payable. Only ever transitions unpaid -> paid."""
    id: str
    title: str
    amount_cents: int
    due_date: datetime
    is_paid: bool = False
    is_recurring: bool = False
    proof_image: Optional[str] = field(default=None, repr=False)

    def to_dict(self, include_proof: bool = False) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "amount_cents": self.amount_cents,
            "due_date": to_utc_z(self.due_date),
            "is_paid": self.is_paid,
            "is_recurring": self.is_recurring,
            "has_proof_image": self.proof_image is not None,
        }
        if include_proof:
            data["proof_image"] = self.proof_image
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "StoreDebt":
        due_date = data["due_date"]
        if isinstance(due_date, str):
            due_date = parse_iso_datetime(due_date)
        return cls(
            id=str(data["id"]),
            title=data["title"],
            amount_cents=int(data.get("amount_cents") or 0),
            due_date=due_date,
            is_paid=bool(data.get("is_paid")),
            is_recurring=bool(data.get("is_recurring")),
            proof_image=data.get("proof_image"),
        )
