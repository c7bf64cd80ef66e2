"""
Orders API - order history and the daily dashboard cards.
"""

from datetime import date
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from balcao.serializers import serialize_order, success_response
from balcao.services import order_browser_service
from balcao.validation import ValidationError

# Create blueprint without url_prefix (inherited from parent)
orders_bp = Blueprint("orders", __name__)


def _parse_day(value: str | None, field: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Data inválida em '{field}' (use AAAA-MM-DD)")


@orders_bp.get("/stores/<int:store_id>/orders")
def list_orders(store_id: int):
    """
    Listar pedidos

    Query params:
        date_from, date_to: YYYY-MM-DD, both inclusive

    Returns the flat list and the same orders grouped by day (dd/mm/yyyy).
    """
    date_from = _parse_day(request.args.get("date_from"), "date_from")
    date_to = _parse_day(request.args.get("date_to"), "date_to")

    orders = order_browser_service.list_orders(store_id, date_from, date_to)
    grouped = order_browser_service.group_orders_by_date(
        orders, current_app.config["REPORT_TIMEZONE"]
    )
    return jsonify(
        success_response(
            {
                "orders": [serialize_order(order) for order in orders],
                "grouped": [
                    {"date": day, "orders": [order.id for order in day_orders]}
                    for day, day_orders in grouped.items()
                ],
            }
        )
    ), HTTPStatus.OK


@orders_bp.get("/stores/<int:store_id>/orders/stats/today")
def get_today_stats(store_id: int):
    return jsonify(success_response(order_browser_service.get_today_stats(store_id))), HTTPStatus.OK
