# Overview: Receivables (client balances) and payables (store debts).

"""
Ledger Service

RECEIVABLES: a client with balance_cents < 0 owes the shop. Settling a
payment adds the amount to the balance; there is no floor or ceiling, so an
overpayment leaves the client with store credit.

PAYABLES: store debts only move unpaid -> paid. Paying an already paid debt
is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..records import Client, StoreDebt
from ..time_utils import utcnow


logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Raised for ledger operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class LedgerNotFoundError(LedgerError):
    """Raised when a client or store debt does not exist."""
    pass


def register_client(
    ledger,
    *,
    name: str,
    phone: Optional[str] = None,
    cpf: Optional[str] = None,
    address: Optional[str] = None,
) -> Client:
    client = Client(
        id=ledger.new_client_id(),
        name=name,
        balance_cents=0,
        phone=phone or None,
        cpf=cpf or None,
        address=address or None,
    )
    ledger.replace_clients(ledger.clients() + [client])
    logger.info("Registered client %s (%r)", client.id, client.name)
    return client


def receivables(ledger) -> dict:
    debtors = [c for c in ledger.clients() if c.balance_cents < 0]
    return {
        "items": [c.to_dict() for c in debtors],
        "count": len(debtors),
        "total_receivable_cents": sum(abs(c.balance_cents) for c in debtors),
    }


def settle_client_payment(ledger, client_id: str, amount_cents: int) -> Client:
    """Record a payment from a client: balance += amount."""
    if amount_cents is None or amount_cents <= 0:
        raise LedgerError("amount_cents must be > 0")

    client = ledger.find_client(client_id)
    if client is None:
        raise LedgerNotFoundError("Client not found", details={"client_id": client_id})

    updated = replace(client, balance_cents=client.balance_cents + amount_cents)
    ledger.replace_clients([updated if c.id == client.id else c for c in ledger.clients()])
    logger.info("Client %s paid %d; balance now %d", client.id, amount_cents, updated.balance_cents)
    return updated


def payables(ledger) -> dict:
    debts = ledger.store_debts()
    unpaid = [d for d in debts if not d.is_paid]
    return {
        "items": [d.to_dict() for d in debts],
        "count": len(debts),
        "unpaid_count": len(unpaid),
        "total_payable_cents": sum(d.amount_cents for d in unpaid),
    }


def add_store_debt(
    ledger,
    *,
    title: str,
    amount_cents: int,
    due_date: Optional[datetime] = None,
    is_recurring: bool = False,
    proof_image: Optional[str] = None,
) -> StoreDebt:
    if amount_cents is None or amount_cents < 0:
        raise LedgerError("amount_cents must be >= 0")
    debt = StoreDebt(
        id=ledger.new_store_debt_id(),
        title=title,
        amount_cents=amount_cents,
        due_date=due_date or utcnow(),
        is_paid=False,
        is_recurring=is_recurring,
        proof_image=proof_image,
    )
    ledger.replace_store_debts(ledger.store_debts() + [debt])
    return debt


def pay_store_debt(ledger, debt_id: str) -> StoreDebt:
    debt = ledger.find_store_debt(debt_id)
    if debt is None:
        raise LedgerNotFoundError("Store debt not found", details={"debt_id": debt_id})
    if debt.is_paid:
        return debt

    paid = replace(debt, is_paid=True)
    ledger.replace_store_debts([paid if d.id == debt.id else d for d in ledger.store_debts()])
    logger.info("Store debt %s (%r) marked as paid", debt.id, debt.title)
    return paid
