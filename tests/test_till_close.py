from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from balcao.db import get_session
from balcao.errors import ConflictError
from balcao.models import Order, TillSession
from balcao.services import till_service
from balcao.services.till_service import STEP_FAILED, STEP_OK, STEP_SKIPPED, ClosePipeline
from balcao.validation import ValidationError


def _reload_till(register_id: int) -> TillSession:
    with get_session() as db:
        return db.get(TillSession, register_id)


def _statuses(order_ids) -> list[str]:
    with get_session() as db:
        return [db.get(Order, order_id).status for order_id in order_ids]


def test_open_session_persists_opening_amount(store) -> None:
    till = till_service.open_session(store.id, "100.50", opened_by="Maria")

    saved = _reload_till(till.id)
    assert saved.initial_amount == 100.5
    assert saved.closed_at is None
    assert saved.opened_by == "Maria"
    assert till_service.get_open_session(store.id).id == till.id


@pytest.mark.parametrize("amount", [None, "", "abc", "-1", "nan"])
def test_open_session_rejects_invalid_amount(store, amount) -> None:
    with pytest.raises(ValidationError):
        till_service.open_session(store.id, amount)

    assert till_service.get_open_session(store.id) is None


def test_link_orders_attaches_reservations(make_till, make_order) -> None:
    till = make_till()
    reservation = make_order(status="pending")
    make_order(status="delivered")

    linkable = till_service.list_linkable_orders(till.store_id)
    assert [order.id for order in linkable] == [reservation.id]

    assert till_service.link_orders(till.store_id, till.id, [reservation.id]) == 1
    assert till_service.compute_summary(till.id).total_sales == reservation.total


def test_link_orders_empty_selection_is_noop(make_till) -> None:
    till = make_till()
    assert till_service.link_orders(till.store_id, till.id, []) == 0


def test_close_persists_sales_total_only(make_till, make_order) -> None:
    till = make_till(initial_amount=100.0)
    first = make_order(total=70.0, payment_method="PIX", cash_register_id=till.id)
    second = make_order(total=50.0, payment_method="Dinheiro", cash_register_id=till.id)
    cancelled = make_order(total=30.0, status="cancelled", cash_register_id=till.id)

    result = till_service.close_session(till.store_id, till.id)

    assert result.ok
    assert [step.status for step in result.steps] == [STEP_OK, STEP_OK, STEP_OK]
    saved = _reload_till(till.id)
    assert saved.closed_at is not None
    assert saved.final_amount == 120.0
    assert result.summary.final_amount == 120.0
    assert result.summary.estimated_final_amount == 220.0
    assert _statuses([first.id, second.id, cancelled.id]) == ["delivered", "delivered", "cancelled"]


def test_close_already_closed_till(make_till) -> None:
    till = make_till(closed=True)
    with pytest.raises(ConflictError):
        till_service.close_session(till.store_id, till.id)


def test_close_partial_failure_keeps_till_closed(make_till, make_order, monkeypatch) -> None:
    till = make_till()
    order = make_order(total=20.0, cash_register_id=till.id)

    def _fail(self):
        raise OperationalError("UPDATE orders", {}, Exception("connection lost"))

    monkeypatch.setattr(ClosePipeline, "_mark_delivered", _fail)

    result = till_service.close_session(till.store_id, till.id)

    assert not result.ok
    assert [(step.name, step.status) for step in result.steps] == [
        ("close_register", STEP_OK),
        ("collect_orders", STEP_OK),
        ("mark_delivered", STEP_FAILED),
    ]
    assert _reload_till(till.id).closed_at is not None
    assert _statuses([order.id]) == ["pending"]


def test_close_failure_skips_remaining_steps(make_till, make_order, monkeypatch) -> None:
    till = make_till()
    order = make_order(total=20.0, cash_register_id=till.id)

    def _fail(self):
        raise OperationalError("SELECT orders", {}, Exception("timeout"))

    monkeypatch.setattr(ClosePipeline, "_collect_orders", _fail)

    result = till_service.close_session(till.store_id, till.id)

    assert [step.status for step in result.steps] == [STEP_OK, STEP_FAILED, STEP_SKIPPED]
    assert _statuses([order.id]) == ["pending"]


def test_history_lists_newest_first(make_till) -> None:
    older = make_till(closed=True, opened_at=datetime(2024, 3, 1, 9, 0))
    newer = make_till(opened_at=datetime(2024, 3, 2, 9, 0))

    history = till_service.list_history(older.store_id)

    assert [till.id for till in history] == [newer.id, older.id]


def test_link_orders_skips_attached_and_finished_orders(make_till, make_order) -> None:
    closed = make_till(closed=True)
    historic = make_order(total=40.0, status="delivered", cash_register_id=closed.id)
    current = make_till()
    delivered = make_order(status="delivered")
    cancelled = make_order(status="cancelled")
    pending = make_order(status="pending")

    linked = till_service.link_orders(
        current.store_id, current.id, [historic.id, delivered.id, cancelled.id, pending.id]
    )

    assert linked == 1
    assert till_service.compute_summary(closed.id).total_sales == 40.0
    with get_session() as db:
        assert db.get(Order, historic.id).cash_register_id == closed.id
        assert db.get(Order, delivered.id).cash_register_id is None
        assert db.get(Order, cancelled.id).cash_register_id is None
        assert db.get(Order, pending.id).cash_register_id == current.id


@pytest.mark.parametrize("amount", ["inf", "-inf", float("inf")])
def test_open_session_rejects_infinite_amount(store, amount) -> None:
    with pytest.raises(ValidationError):
        till_service.open_session(store.id, amount)

    assert till_service.get_open_session(store.id) is None
