from __future__ import annotations

from ..extensions import db
from ..records import Product as ProductRecord


class Product(db.Model):
    """
    Catalog row.

    The products collection is always rewritten in full, so `position` keeps
    the collection order stable across reloads. Reconciliation relies on that
    order (first name match wins).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_position", "position"),
        db.Index("ix_products_barcode", "barcode"),
    )

    id = db.Column(db.String(64), primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    cost_cents = db.Column(db.Integer, nullable=False, default=0)

    # Signed; checkout may drive it below zero
    stock = db.Column(db.Float, nullable=False, default=0)
    unit = db.Column(db.String(8), nullable=False, default="un")
    barcode = db.Column(db.String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=self.id,
            name=self.name,
            price_cents=self.price_cents,
            cost_cents=self.cost_cents,
            stock=self.stock,
            unit=self.unit,
            barcode=self.barcode,
        )

    @classmethod
    def from_record(cls, record: ProductRecord, position: int) -> "Product":
        return cls(
            id=record.id,
            position=position,
            name=record.name,
            price_cents=record.price_cents,
            cost_cents=record.cost_cents,
            stock=record.stock,
            unit=record.unit,
            barcode=record.barcode,
        )
