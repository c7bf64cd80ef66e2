"""
Order history browsing and the daily dashboard cards.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from balcao.constants import PENDING_ORDER_STATUSES
from balcao.datetime_utils import end_of_day_exclusive, format_br_date, start_of_day, utcnow
from balcao.db import get_session
from balcao.errors import RetrievalError
from balcao.logging_config import get_logger
from balcao.models import Order

logger = get_logger(__name__)


def list_orders(
    store_id: int, date_from: date | None = None, date_to: date | None = None
) -> list[Order]:
    """
    Orders of the store with customer and items, newest first.

    Args:
        store_id: Store whose orders are listed
        date_from: Inclusive start day
        date_to: Inclusive end day (filters `< date_to + 1 day`)
    """
    stmt = (
        select(Order)
        .options(joinedload(Order.customer), selectinload(Order.items))
        .where(Order.store_id == store_id)
    )
    if date_from:
        stmt = stmt.where(Order.created_at >= start_of_day(date_from))
    if date_to:
        stmt = stmt.where(Order.created_at < end_of_day_exclusive(date_to))

    try:
        with get_session() as db:
            orders = list(
                db.execute(stmt.order_by(Order.created_at.desc(), Order.id.desc())).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading orders for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar todos os pedidos") from exc

    logger.debug("Listed %s orders for store %s", len(orders), store_id)
    return orders


def group_orders_by_date(
    orders: list[Order], timezone_name: str = "UTC"
) -> dict[str, list[Order]]:
    """Group by dd/mm/yyyy, keeping the incoming order of days and orders."""
    grouped: dict[str, list[Order]] = {}
    for order in orders:
        grouped.setdefault(format_br_date(order.created_at, timezone_name), []).append(order)
    return grouped


def get_today_stats(store_id: int) -> dict[str, float | int]:
    """Sales, order count and pending orders since midnight (UTC)."""
    today_start = start_of_day(utcnow().date())
    try:
        with get_session() as db:
            sales, count = db.execute(
                select(func.coalesce(func.sum(Order.total), 0), func.count(Order.id)).where(
                    Order.store_id == store_id, Order.created_at >= today_start
                )
            ).one()
            pending = db.scalar(
                select(func.count(Order.id)).where(
                    Order.store_id == store_id,
                    Order.created_at >= today_start,
                    Order.status.in_(PENDING_ORDER_STATUSES),
                )
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading today's stats for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar estatísticas") from exc

    return {
        "today_sales": float(sales or 0),
        "today_orders": int(count or 0),
        "pending_orders": int(pending or 0),
    }
