from __future__ import annotations

from ..extensions import db
from ..records import (
    CartItem,
    Client as ClientRecord,
    PaymentMethod,
    Sale as SaleRecord,
    StoreDebt as StoreDebtRecord,
)


class Client(db.Model):
    """
    Receivables account.

    balance_cents < 0 means the client owes the shop; > 0 is store credit.
    """
    __tablename__ = "clients"
    __table_args__ = (db.Index("ix_clients_position", "position"),)

    id = db.Column(db.String(64), primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    name = db.Column(db.String(255), nullable=False)
    balance_cents = db.Column(db.Integer, nullable=False, default=0)
    phone = db.Column(db.String(32), nullable=True)
    cpf = db.Column(db.String(32), nullable=True)
    address = db.Column(db.String(255), nullable=True)

    def to_record(self) -> ClientRecord:
        return ClientRecord(
            id=self.id,
            name=self.name,
            balance_cents=self.balance_cents,
            phone=self.phone,
            cpf=self.cpf,
            address=self.address,
        )

    @classmethod
    def from_record(cls, record: ClientRecord, position: int) -> "Client":
        return cls(
            id=record.id,
            position=position,
            name=record.name,
            balance_cents=record.balance_cents,
            phone=record.phone,
            cpf=record.cpf,
            address=record.address,
        )


class Sale(db.Model):
    """
    Sales history entry.

    IMMUTABLE: written once at checkout. Line items and client name are
    stored as snapshots (JSON), never joined back to the live catalog.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_position", "position"),
        db.Index("ix_sales_occurred_at", "occurred_at"),
    )

    id = db.Column(db.String(64), primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)
    client_id = db.Column(db.String(64), nullable=False)
    client_name = db.Column(db.String(255), nullable=False)
    items = db.Column(db.JSON, nullable=False, default=list)

    # All amounts in cents
    total_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)
    change_cents = db.Column(db.Integer, nullable=False, default=0)

    def to_record(self) -> SaleRecord:
        return SaleRecord(
            id=self.id,
            date=self.occurred_at,
            client_id=self.client_id,
            client_name=self.client_name,
            items=tuple(CartItem.from_dict(item) for item in self.items or []),
            total_cents=self.total_cents,
            payment_method=PaymentMethod(self.payment_method),
            amount_paid_cents=self.amount_paid_cents,
            change_cents=self.change_cents,
        )

    @classmethod
    def from_record(cls, record: SaleRecord, position: int) -> "Sale":
        return cls(
            id=record.id,
            position=position,
            occurred_at=record.date,
            client_id=record.client_id,
            client_name=record.client_name,
            items=[item.to_dict() for item in record.items],
            total_cents=record.total_cents,
            payment_method=record.payment_method.value,
            amount_paid_cents=record.amount_paid_cents,
            change_cents=record.change_cents,
        )


class StoreDebt(db.Model):
    """Payable owed by the shop (bills, supplier invoices)."""
    __tablename__ = "store_debts"
    __table_args__ = (db.Index("ix_store_debts_position", "position"),)

    id = db.Column(db.String(64), primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    title = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False, default=0)
    due_date = db.Column(db.DateTime(timezone=True), nullable=False)
    is_paid = db.Column(db.Boolean, nullable=False, default=False)
    is_recurring = db.Column(db.Boolean, nullable=False, default=False)

    # data: URL of the photographed invoice, when created by reconciliation
    proof_image = db.Column(db.Text, nullable=True)

    def to_record(self) -> StoreDebtRecord:
        return StoreDebtRecord(
            id=self.id,
            title=self.title,
            amount_cents=self.amount_cents,
            due_date=self.due_date,
            is_paid=self.is_paid,
            is_recurring=self.is_recurring,
            proof_image=self.proof_image,
        )

    @classmethod
    def from_record(cls, record: StoreDebtRecord, position: int) -> "StoreDebt":
        return cls(
            id=record.id,
            position=position,
            title=record.title,
            amount_cents=record.amount_cents,
            due_date=record.due_date,
            is_paid=record.is_paid,
            is_recurring=record.is_recurring,
            proof_image=record.proof_image,
        )
