# Overview: Sales reporting over the immutable sales history.

from __future__ import annotations

from collections import OrderedDict

from ..records import PaymentMethod
from ..time_utils import day_key, day_label

DEFAULT_REPORT_DAYS = 7
MAX_REPORT_DAYS = 366


class ReportError(Exception):
    pass


def sales_summary(ledger, days: int = DEFAULT_REPORT_DAYS) -> dict:
    """
    Totals over the whole history plus per-day totals for the most recent
    `days` days that had sales (chart data, oldest first).
    """
    if days < 1 or days > MAX_REPORT_DAYS:
        raise ReportError(f"days must be between 1 and {MAX_REPORT_DAYS}")

    sales = sorted(ledger.sales(), key=lambda s: s.date)

    per_day: "OrderedDict[str, int]" = OrderedDict()
    by_method = {m.value: 0 for m in PaymentMethod}
    for sale in sales:
        key = day_key(sale.date)
        per_day[key] = per_day.get(key, 0) + sale.total_cents
        by_method[sale.payment_method.value] += sale.total_cents

    recent = list(per_day.items())[-days:]
    return {
        "total_sales_cents": sum(s.total_cents for s in sales),
        "sales_count": len(sales),
        "by_payment_method_cents": by_method,
        "daily": [
            {"date": day, "label": day_label(day), "total_cents": total}
            for day, total in recent
        ],
    }
