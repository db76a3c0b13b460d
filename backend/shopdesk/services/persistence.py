# Overview: SQLAlchemy-backed persistence for the four shop collections.

"""
Collection persistence

The core never issues partial-record updates. Every save hands over the
complete replacement collection; this module deletes the stored rows and
writes the new ones, bumping the collection's StoredCollection marker, all
inside a single database transaction. Saving several collections in one call
is atomic across them.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping, Sequence

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..models import Client, Product, Sale, StoreDebt, StoredCollection
from ..time_utils import utcnow


logger = logging.getLogger(__name__)

COLLECTION_MODELS = {
    "products": Product,
    "clients": Client,
    "sales": Sale,
    "storeDebts": StoreDebt,
}


class PersistenceError(Exception):
    """Raised when a collection cannot be loaded or saved."""
    pass


def _model_for(name: str):
    try:
        return COLLECTION_MODELS[name]
    except KeyError:
        raise PersistenceError(f"Unknown collection: {name}")


class SqlCollectionPersistence:
    def __init__(self, db, *, save_attempts: int = 3, retry_delay: float = 0.1):
        self.db = db
        self.save_attempts = save_attempts
        self.retry_delay = retry_delay

    def load(self, name: str) -> list | None:
        """
        Return the stored records of a collection in saved order, or None when
        the collection has never been saved.
        """
        model = _model_for(name)
        session = self.db.session
        try:
            marker = session.get(StoredCollection, name)
            if marker is None:
                return None
            rows = session.query(model).order_by(model.position.asc()).all()
            return [row.to_record() for row in rows]
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"Failed to load collection {name}") from exc

    def save(self, collections: Mapping[str, Sequence]) -> None:
        """Replace each given collection in full, in one transaction."""
        models = {name: _model_for(name) for name in collections}

        def _op():
            session = self.db.session
            # Old rows are about to be replaced wholesale; drop them from the identity map
            session.expunge_all()
            now = utcnow()
            for name, records in collections.items():
                model = models[name]
                session.query(model).delete(synchronize_session=False)
                session.add_all(
                    model.from_record(record, position)
                    for position, record in enumerate(records)
                )

                marker = session.get(StoredCollection, name)
                if marker is None:
                    marker = StoredCollection(name=name, version=0)
                    session.add(marker)
                marker.version = (marker.version or 0) + 1
                marker.record_count = len(records)
                marker.saved_at = now
            session.commit()

        try:
            self._with_retry(_op)
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise PersistenceError(
                f"Failed to save collections: {', '.join(collections)}"
            ) from exc

    def describe(self) -> list[dict]:
        rows = self.db.session.query(StoredCollection).order_by(StoredCollection.name.asc()).all()
        return [row.to_dict() for row in rows]

    def _with_retry(self, op) -> None:
        """
        Run a rewrite, retrying while SQLite reports the file as locked.

        Each failed attempt is rolled back in full before the next one, so a
        retry rewrites the collections from scratch.
        """
        for attempt in range(1, self.save_attempts + 1):
            try:
                op()
                return
            except OperationalError:
                self.db.session.rollback()
                if attempt == self.save_attempts:
                    raise
                logger.warning("Collection save hit a locked database (attempt %d/%d)", attempt, self.save_attempts)
                time.sleep(self.retry_delay * attempt)
