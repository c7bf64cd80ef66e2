import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG_MODE"] = "true"
os.environ["REPORT_TIMEZONE"] = "UTC"
os.environ["PUBLIC_BASE_URL"] = "https://balcao.test/"
os.environ["SUPABASE_URL"] = "https://project.supabase.co"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402

from balcao.db import get_engine, get_session  # noqa: E402
from balcao.models import Base, Order, OrderItem, Product, Store, TillSession  # noqa: E402
from balcao.supabase.storage import SupabaseStorage  # noqa: E402
from dashboard_app.app import create_app  # noqa: E402


@pytest.fixture(scope="session")
def app():
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture(autouse=True)
def _fresh_database(app):
    engine = get_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    SupabaseStorage.reset()
    yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store() -> Store:
    with get_session() as db:
        store = Store(name="Lanchonete Central", is_active=True)
        db.add(store)
        db.flush()
    return store


@pytest.fixture
def make_till(store):
    def _make_till(initial_amount=100.0, closed=False, opened_at=None, store_id=None) -> TillSession:
        with get_session() as db:
            till = TillSession(
                store_id=store_id or store.id,
                opened_at=opened_at or datetime(2024, 3, 10, 11, 30),
                closed_at=datetime(2024, 3, 10, 22, 0) if closed else None,
                initial_amount=initial_amount,
                final_amount=None,
            )
            db.add(till)
            db.flush()
        return till

    return _make_till


@pytest.fixture
def make_order(store):
    counter = {"n": 0}

    def _make_order(
        total=10.0,
        payment_method="Dinheiro",
        source="presencial",
        status="pending",
        items=(("Burger", None, 1),),
        cash_register_id=None,
        customer_id=None,
        created_at=None,
        store_id=None,
    ) -> Order:
        counter["n"] += 1
        with get_session() as db:
            order = Order(
                store_id=store_id or store.id,
                order_number=f"#{counter['n']:04d}",
                status=status,
                total=total,
                payment_method=payment_method,
                source=source,
                cash_register_id=cash_register_id,
                customer_id=customer_id,
                created_at=created_at or datetime(2024, 3, 10, 12, counter["n"] % 60),
            )
            order.items = [
                OrderItem(
                    product_name=name,
                    variation_name=variation,
                    quantity=quantity,
                    product_price=0,
                    subtotal=0,
                )
                for name, variation, quantity in items
            ]
            db.add(order)
            db.flush()
        return order

    return _make_order


@pytest.fixture
def make_product(store):
    def _make_product(name, price=0.0) -> Product:
        with get_session() as db:
            product = Product(store_id=store.id, name=name, price=price)
            db.add(product)
            db.flush()
        return product

    return _make_product
