from flask import Blueprint, jsonify, request

from shopdesk.decorators import require_operator
from shopdesk.extensions import shop
from shopdesk.services import reporting_service
from shopdesk.services.products_service import low_stock, product_to_dict


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/sales")
@require_operator
def sales_report():
    days = request.args.get("days", default=reporting_service.DEFAULT_REPORT_DAYS, type=int)

    try:
        report = reporting_service.sales_summary(shop.ledger, days=days)
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/low-stock")
@require_operator
def low_stock_report():
    products = low_stock(shop.catalog)
    return jsonify({"items": [product_to_dict(p) for p in products], "count": len(products)}), 200
