from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from balcao.constants import ChannelLabel, PaymentBucket, PaymentLabel
from balcao.errors import NotFoundError, RetrievalError
from balcao.models import Order, OrderItem, TillSession
from balcao.services import till_service
from balcao.services.till_service import ChannelCount, PaymentTotal, ProductTally


def _till(initial_amount=100.0, closed_at=None) -> TillSession:
    return TillSession(
        id=7,
        store_id=1,
        opened_at=datetime(2024, 3, 10, 11, 30),
        closed_at=closed_at,
        initial_amount=initial_amount,
        final_amount=None,
    )


def _order(total, payment_method="Dinheiro", source="presencial", status="delivered", items=()):
    order = Order(total=total, payment_method=payment_method, source=source, status=status)
    order.items = [
        OrderItem(product_name=name, variation_name=variation, quantity=quantity)
        for name, variation, quantity in items
    ]
    return order


def test_single_credit_card_order_from_totem() -> None:
    order = _order(
        50.0,
        payment_method="Cartão de Crédito",
        source="totem",
        items=[("Burger", None, 2), ("Fries", None, 1)],
    )

    summary = till_service.summarize_orders(_till(), [order])

    assert summary.products_sold == [ProductTally("Burger", 2), ProductTally("Fries", 1)]
    assert summary.payment_method_totals == [PaymentTotal("Crédito", 50.0)]
    assert summary.orders_by_source == [ChannelCount("Totem", 1)]
    assert summary.loyalty_orders_count == 0
    assert summary.total_sales == 50.0


def test_cancelled_order_contributes_nothing() -> None:
    orders = [
        _order(30.0, status="cancelled", items=[("Pastel", None, 3)]),
        _order(20.0, items=[("Suco", None, 1)]),
    ]

    summary = till_service.summarize_orders(_till(), orders)

    assert summary.total_sales == 20.0
    assert summary.orders_by_source == [ChannelCount("Presencial", 1)]
    assert summary.products_sold == [ProductTally("Suco", 1)]
    assert summary.payment_method_totals == [PaymentTotal("Dinheiro", 20.0)]


def test_loyalty_and_cash_counted_independently() -> None:
    summary = till_service.summarize_orders(_till(), [_order(15.0, "Fidelidade + Dinheiro")])

    assert summary.loyalty_orders_count == 1
    assert summary.payment_method_totals == [PaymentTotal("Dinheiro", 15.0)]
    assert summary.total_sales == 15.0


def test_unmatched_payment_label_only_adds_to_total() -> None:
    orders = [_order(12.0, "Vale refeição"), _order(8.0, "PIX")]

    summary = till_service.summarize_orders(_till(), orders)

    assert summary.total_sales == 20.0
    assert summary.payment_method_totals == [PaymentTotal("PIX", 8.0)]


def test_zero_total_orders_do_not_create_buckets() -> None:
    summary = till_service.summarize_orders(_till(), [_order(0.0, "Fidelidade")])

    assert summary.payment_method_totals == []
    assert summary.loyalty_orders_count == 1


def test_variation_items_tallied_apart_from_plain_items() -> None:
    orders = [
        _order(10.0, items=[("Açaí", "500ml", 1), ("Açaí", None, 1)]),
        _order(10.0, items=[("Açaí", "500ml", 2)]),
    ]

    summary = till_service.summarize_orders(_till(), orders)

    assert summary.products_sold == [ProductTally("Açaí (500ml)", 3), ProductTally("Açaí", 1)]


def test_buckets_follow_fixed_order() -> None:
    orders = [_order(5.0, "Débito"), _order(7.0, "pix"), _order(3.0, "dinheiro")]

    summary = till_service.summarize_orders(_till(), orders)

    assert [p.method for p in summary.payment_method_totals] == ["Dinheiro", "PIX", "Débito"]


def test_unknown_channel_keeps_literal_name() -> None:
    orders = [_order(5.0, source=None), _order(5.0, source="balcao_2"), _order(5.0, source="ifood")]

    summary = till_service.summarize_orders(_till(), orders)

    assert summary.orders_by_source == [
        ChannelCount("Presencial", 1),
        ChannelCount("balcao_2", 1),
        ChannelCount("Ifood", 1),
    ]


def test_estimated_final_amount_is_derived() -> None:
    summary = till_service.summarize_orders(_till(initial_amount=100.0), [_order(120.0)])

    assert summary.is_open
    assert summary.estimated_final_amount == 220.0
    assert summary.final_amount is None


def test_payment_label_parse() -> None:
    label = PaymentLabel.parse("Cartão de Débito")
    assert label.bucket is PaymentBucket.DEBIT
    assert not label.is_loyalty

    other = PaymentLabel.parse(None)
    assert other.is_other
    assert other.raw == ""


def test_channel_label_defaults_to_in_person() -> None:
    assert ChannelLabel.parse(None).display_name == "Presencial"
    assert ChannelLabel.parse("loja_online").display_name == "Loja Online"
    assert ChannelLabel.parse("telefone").is_other


def test_compute_summary_reads_linked_orders(make_till, make_order) -> None:
    till = make_till(initial_amount=50.0)
    make_order(total=40.0, payment_method="PIX", cash_register_id=till.id)
    make_order(total=25.0, payment_method="Dinheiro", status="cancelled", cash_register_id=till.id)
    make_order(total=99.0)

    summary = till_service.compute_summary(till.id)

    assert summary.register_id == till.id
    assert summary.total_sales == 40.0
    assert summary.initial_amount == 50.0
    assert summary.payment_method_totals == [PaymentTotal("PIX", 40.0)]


def test_compute_summary_unknown_till(store) -> None:
    with pytest.raises(NotFoundError):
        till_service.compute_summary(999, store.id)


def test_compute_summary_other_store_till(make_till) -> None:
    till = make_till()
    with pytest.raises(NotFoundError):
        till_service.compute_summary(till.id, store_id=till.store_id + 1)


def test_compute_summary_retrieval_failure(make_till, monkeypatch) -> None:
    till = make_till()

    def _fail(*args, **kwargs):
        raise OperationalError("SELECT orders", {}, Exception("connection lost"))

    monkeypatch.setattr(till_service, "_load_till", _fail)

    with pytest.raises(RetrievalError):
        till_service.compute_summary(till.id)


def test_label_with_two_keywords_goes_to_first_bucket_only() -> None:
    orders = [_order(25.0, "Dinheiro / PIX"), _order(10.0, "Pix ou Cartão de Crédito")]

    summary = till_service.summarize_orders(_till(), orders)

    assert summary.payment_method_totals == [PaymentTotal("Dinheiro", 25.0), PaymentTotal("PIX", 10.0)]
    assert sum(p.total for p in summary.payment_method_totals) == summary.total_sales
