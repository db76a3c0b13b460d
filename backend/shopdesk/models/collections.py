from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class StoredCollection(db.Model):
    """
    One row per collection that has been saved at least once.

    A missing row means the collection was never written, which is what
    triggers seeding on first load. An empty table with a row present is a
    legitimately empty collection.
    """
    __tablename__ = "stored_collections"

    name = db.Column(db.String(32), primary_key=True)
    version = db.Column(db.Integer, nullable=False, default=0)
    record_count = db.Column(db.Integer, nullable=False, default=0)
    saved_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "record_count": self.record_count,
            "saved_at": to_utc_z(self.saved_at),
        }
