"""
Shop state loading/seeding and the SQL collection persistence.
"""

from datetime import datetime

import pytest

from conftest import MemoryPersistence

from shopdesk.extensions import db
from shopdesk.models import Product as ProductRow, StoredCollection
from shopdesk.records import CartItem, Client, PaymentMethod, Product, Sale, StoreDebt
from shopdesk.services.persistence import PersistenceError, SqlCollectionPersistence
from shopdesk.services.store import COLLECTIONS, ShopContext


# --- ShopContext -------------------------------------------------------------

def test_never_saved_collections_are_seeded_and_written_back():
    persistence = MemoryPersistence()
    context = ShopContext(persistence)

    context.load()

    assert [p.name for p in context.catalog.products()] == ["Coca Cola 2L", "Pão Francês (kg)", "Detergente Ypê"]
    assert context.ledger.find_client("0").name == "NI (Não Identificado)"
    assert context.ledger.sales() == []
    assert sorted(persistence.stored) == sorted(COLLECTIONS)


def test_saved_empty_collection_is_not_reseeded():
    persistence = MemoryPersistence({"products": [], "clients": [], "sales": [], "storeDebts": []})
    context = ShopContext(persistence)

    context.load()

    assert context.catalog.products() == []
    assert context.ledger.store_debts() == []
    # The unidentified client is always present
    assert [c.id for c in context.ledger.clients()] == ["0"]


def test_seeding_can_be_disabled():
    context = ShopContext(MemoryPersistence(), seed_defaults=False)

    assert context.catalog.products() == []
    assert [c.id for c in context.ledger.clients()] == ["0"]


def test_commit_failure_keeps_previous_snapshot(context, persistence):
    before = context.catalog.products()
    persistence.fail_saves = True

    with pytest.raises(PersistenceError):
        context.catalog.replace_products([])

    assert context.catalog.products() == before


def test_commit_rejects_unknown_collection(context):
    with pytest.raises(ValueError):
        context.commit(orders=[])


def test_snapshots_are_copies(context):
    products = context.catalog.products()
    products.clear()

    assert len(context.catalog.products()) == 3


def test_new_ids_are_unique(context):
    ids = {context.catalog.new_id() for _ in range(3)}
    assert len(ids) == 3


# --- SqlCollectionPersistence --------------------------------------------------

def test_sql_load_returns_none_until_saved(app):
    persistence = SqlCollectionPersistence(db)

    assert persistence.load("products") is None

    persistence.save({"products": []})
    assert persistence.load("products") == []


def test_sql_round_trip_keeps_order_and_fields(app):
    persistence = SqlCollectionPersistence(db)
    products = [
        Product(id="20", name="Zebra", price_cents=100, cost_cents=50, stock=-2, unit="un", barcode=None),
        Product(id="10", name="Alface", price_cents=350, cost_cents=200, stock=1.5, unit="kg", barcode="123"),
    ]
    sale = Sale(
        id="s1",
        date=datetime(2024, 3, 1, 12, 0),
        client_id="1",
        client_name="João Silva",
        items=(CartItem(product_id="10", name="Alface", price_cents=350, cost_cents=200,
                        unit="kg", barcode="123", quantity=1.5, subtotal_cents=525),),
        total_cents=525,
        payment_method=PaymentMethod.DEBT,
        amount_paid_cents=0,
        change_cents=0,
    )
    debt = StoreDebt(id="d1", title="Compra (Nota Hoje)", amount_cents=999, due_date=datetime(2024, 3, 2),
                     proof_image="data:image/png;base64,AAAA")

    persistence.save({
        "products": products,
        "clients": [Client(id="1", name="João Silva", balance_cents=-525)],
        "sales": [sale],
        "storeDebts": [debt],
    })
    db.session.expunge_all()

    assert persistence.load("products") == products
    assert persistence.load("sales") == [sale]
    assert persistence.load("storeDebts") == [debt]
    assert persistence.load("clients")[0].balance_cents == -525


def test_sql_save_replaces_whole_collection_and_bumps_version(app):
    persistence = SqlCollectionPersistence(db)
    persistence.save({"products": [Product(id="1", name="A", price_cents=1, cost_cents=0)]})
    persistence.save({"products": [Product(id="2", name="B", price_cents=2, cost_cents=0)]})

    assert [p.id for p in persistence.load("products")] == ["2"]
    assert db.session.query(ProductRow).count() == 1
    marker = db.session.get(StoredCollection, "products")
    assert marker.version == 2
    assert marker.record_count == 1


def test_sql_unknown_collection(app):
    with pytest.raises(PersistenceError):
        SqlCollectionPersistence(db).load("orders")


def test_app_context_survives_reload(app, shop_context):
    shop_context.ledger.replace_clients(shop_context.ledger.clients() + [Client(id="9", name="Carla")])

    shop_context.reload()

    assert shop_context.ledger.find_client("9").name == "Carla"
    assert shop_context.catalog.find("1").barcode == "7894900011517"
