from flask import Blueprint, Response, jsonify, request

from ..extensions import get_store
from ..services import export_service, reporting_service
from ..time_utils import parse_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _date_range():
    try:
        return parse_date(request.args.get("start")), parse_date(request.args.get("end"))
    except ValueError:
        raise reporting_service.ReportError("start and end must be YYYY-MM-DD dates")


@reports_bp.get("/low-stock")
def low_stock_report():
    products = reporting_service.low_stock_products(get_store())
    return jsonify({
        "threshold": get_store().settings.low_stock_threshold,
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }), 200


@reports_bp.get("/dashboard")
def dashboard_report():
    return jsonify(reporting_service.dashboard(get_store())), 200


@reports_bp.get("/sales")
def sales_report():
    top = request.args.get("top", 10, type=int)
    try:
        start, end = _date_range()
        report = reporting_service.sales_summary(get_store(), start, end, top=top)
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/sales/export")
def sales_export():
    """Download the sales report for [start, end] as CSV."""
    try:
        start, end = _date_range()
        transactions = reporting_service.sales_in_range(get_store(), start, end)
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    filename = export_service.report_filename(start, end)
    return Response(
        export_service.transactions_csv_text(transactions),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
