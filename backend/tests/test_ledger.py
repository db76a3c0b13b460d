"""
Receivables, payables, catalog maintenance and sales reports over an
in-memory shop context.
"""

from datetime import datetime

import pytest

from shopdesk.records import CartItem, PaymentMethod, Sale
from shopdesk.services import ledger_service, products_service, reporting_service
from shopdesk.services.ledger_service import LedgerError, LedgerNotFoundError
from shopdesk.services.products_service import ProductNotFoundError
from shopdesk.validation import ConflictError


# --- receivables -------------------------------------------------------------

def test_receivables_list_debtors_and_total(context):
    result = ledger_service.receivables(context.ledger)

    assert [c["id"] for c in result["items"]] == ["1"]
    assert result["total_receivable_cents"] == 5000


def test_settle_payment_adds_to_balance(context):
    client = ledger_service.settle_client_payment(context.ledger, "1", 2000)

    assert client.balance_cents == -3000
    assert context.ledger.find_client("1").balance_cents == -3000


def test_overpayment_leaves_store_credit(context):
    ledger_service.settle_client_payment(context.ledger, "1", 6000)

    assert context.ledger.find_client("1").balance_cents == 1000
    assert ledger_service.receivables(context.ledger)["count"] == 0


def test_settle_payment_validation(context):
    with pytest.raises(LedgerError):
        ledger_service.settle_client_payment(context.ledger, "1", 0)
    with pytest.raises(LedgerNotFoundError):
        ledger_service.settle_client_payment(context.ledger, "404", 100)


def test_register_client_starts_at_zero(context):
    client = ledger_service.register_client(context.ledger, name="Ana Lima", phone="11977776666", cpf="")

    assert client.balance_cents == 0
    assert client.cpf is None
    assert context.ledger.clients()[-1] == client


# --- payables ----------------------------------------------------------------

def test_payables_total_counts_unpaid_only(context):
    result = ledger_service.payables(context.ledger)

    assert result["count"] == 2
    assert result["unpaid_count"] == 1
    assert result["total_payable_cents"] == 7600


def test_pay_store_debt_is_one_way_and_idempotent(context):
    paid = ledger_service.pay_store_debt(context.ledger, "1")
    again = ledger_service.pay_store_debt(context.ledger, "1")

    assert paid.is_paid is True
    assert again.is_paid is True
    assert ledger_service.payables(context.ledger)["total_payable_cents"] == 0


def test_pay_unknown_store_debt(context):
    with pytest.raises(LedgerNotFoundError):
        ledger_service.pay_store_debt(context.ledger, "404")


def test_add_store_debt(context):
    due = datetime(2024, 2, 1)
    debt = ledger_service.add_store_debt(context.ledger, title="Aluguel", amount_cents=120000, due_date=due, is_recurring=True)

    assert debt.is_paid is False
    assert debt.due_date == due
    assert context.ledger.store_debts()[-1] == debt
    assert ledger_service.payables(context.ledger)["total_payable_cents"] == 7600 + 120000


# --- catalog maintenance -------------------------------------------------------

def test_search_by_name_or_barcode(context):
    assert [p["id"] for p in products_service.list_products(context.catalog, "coca")["items"]] == ["1"]
    assert [p["id"] for p in products_service.list_products(context.catalog, "7894900011517")["items"]] == ["1"]
    assert products_service.list_products(context.catalog, "789490")["count"] == 0
    assert products_service.list_products(context.catalog)["count"] == 3


def test_create_product_rejects_duplicate_barcode(context):
    with pytest.raises(ConflictError):
        products_service.create_product(
            context.catalog,
            patch={"name": "Coca Zero", "price_cents": 1100, "barcode": "7894900011517"},
        )


def test_create_product_defaults(context):
    product = products_service.create_product(context.catalog, patch={"name": "Sabão", "price_cents": 450})

    assert product.stock == 0
    assert product.unit == "un"
    assert product.cost_cents == 0
    assert products_service.product_to_dict(product)["low_stock"] is True


def test_update_price(context):
    updated = products_service.update_price(context.catalog, "3", 349)

    assert updated.price_cents == 349
    assert context.catalog.find("3").price_cents == 349
    with pytest.raises(ProductNotFoundError):
        products_service.update_price(context.catalog, "404", 100)


def test_price_tags(context):
    assert products_service.price_tags(context.catalog).splitlines() == [
        "Coca Cola 2L: R$ 12.00",
        "Pão Francês (kg): R$ 15.90",
        "Detergente Ypê: R$ 2.99",
    ]


def test_low_stock_threshold(context):
    products_service.create_product(context.catalog, patch={"name": "Fósforo", "price_cents": 100, "stock": 4})
    products_service.create_product(context.catalog, patch={"name": "Vela", "price_cents": 100, "stock": 5})

    assert [p.name for p in products_service.low_stock(context.catalog)] == ["Fósforo"]


# --- reports -----------------------------------------------------------------

def _sale(sale_id, when, total, method=PaymentMethod.CASH):
    item = CartItem(product_id="3", name="Detergente Ypê", price_cents=total, cost_cents=0,
                    unit="un", barcode=None, quantity=1, subtotal_cents=total)
    return Sale(id=sale_id, date=when, client_id="0", client_name="NI", items=(item,),
                total_cents=total, payment_method=method, amount_paid_cents=total, change_cents=0)


def test_sales_summary_groups_by_day(context):
    context.ledger.replace_sales([
        _sale("a", datetime(2024, 3, 1, 10), 1000),
        _sale("b", datetime(2024, 3, 1, 18), 500, PaymentMethod.DEBT),
        _sale("c", datetime(2024, 3, 4, 9), 250, PaymentMethod.CARD),
    ])

    report = reporting_service.sales_summary(context.ledger)

    assert report["total_sales_cents"] == 1750
    assert report["sales_count"] == 3
    assert report["by_payment_method_cents"] == {"CASH": 1000, "CARD": 250, "DEBT": 500}
    assert report["daily"] == [
        {"date": "2024-03-01", "label": "03/01", "total_cents": 1500},
        {"date": "2024-03-04", "label": "03/04", "total_cents": 250},
    ]


def test_sales_summary_keeps_last_days_with_sales(context):
    context.ledger.replace_sales([_sale(str(day), datetime(2024, 3, day), 100) for day in range(1, 11)])

    daily = reporting_service.sales_summary(context.ledger, days=7)["daily"]

    assert [d["label"] for d in daily] == ["03/04", "03/05", "03/06", "03/07", "03/08", "03/09", "03/10"]


def test_sales_summary_rejects_bad_window(context):
    with pytest.raises(reporting_service.ReportError):
        reporting_service.sales_summary(context.ledger, days=0)
