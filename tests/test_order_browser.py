from datetime import date, datetime, timedelta

from balcao.datetime_utils import utcnow
from balcao.services import order_browser_service


def test_list_orders_newest_first_with_inclusive_range(make_order) -> None:
    make_order(created_at=datetime(2024, 3, 9, 23, 59))
    early = make_order(created_at=datetime(2024, 3, 10, 0, 0))
    late = make_order(created_at=datetime(2024, 3, 11, 23, 59))
    make_order(created_at=datetime(2024, 3, 12, 0, 0))

    orders = order_browser_service.list_orders(
        early.store_id, date_from=date(2024, 3, 10), date_to=date(2024, 3, 11)
    )

    assert [order.id for order in orders] == [late.id, early.id]
    assert [item.product_name for item in orders[0].items] == ["Burger"]


def test_group_orders_by_date_keeps_order(make_order) -> None:
    a = make_order(created_at=datetime(2024, 3, 11, 10, 0))
    b = make_order(created_at=datetime(2024, 3, 10, 18, 0))
    c = make_order(created_at=datetime(2024, 3, 10, 9, 0))

    orders = order_browser_service.list_orders(a.store_id)
    grouped = order_browser_service.group_orders_by_date(orders)

    assert list(grouped) == ["11/03/2024", "10/03/2024"]
    assert [order.id for order in grouped["10/03/2024"]] == [b.id, c.id]


def test_today_stats(make_order) -> None:
    now = utcnow()
    make_order(total=30.0, status="pending", created_at=now)
    make_order(total=20.0, status="preparing", created_at=now)
    make_order(total=15.5, status="delivered", created_at=now)
    order = make_order(total=99.0, status="pending", created_at=now - timedelta(days=2))

    stats = order_browser_service.get_today_stats(order.store_id)

    assert stats == {"today_sales": 65.5, "today_orders": 3, "pending_orders": 2}
