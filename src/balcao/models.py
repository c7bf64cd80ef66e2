"""
SQLAlchemy ORM models shared by the balcao services.

Table names mirror the tables of the hosted Supabase project so the models can
be pointed at the production database as-is.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .constants import (
    DEFAULT_MONITOR_IDLE_TIMEOUT_SECONDS,
    DEFAULT_MONITOR_SLIDESHOW_DELAY_MS,
    OrderStatus,
)
from .datetime_utils import utcnow

# Money columns come back as floats; the dashboard sums in currency units.
Money = Numeric(10, 2, asdecimal=False)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class Store(Base):
    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    slug: Mapped[str | None] = mapped_column(String(120), unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    ifood_stock_alert_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    ifood_stock_alert_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    whatsapp_ai_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    whatsapp_ai_api_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    monitor_slideshow_delay: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=DEFAULT_MONITOR_SLIDESHOW_DELAY_MS
    )
    monitor_idle_timeout_seconds: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=DEFAULT_MONITOR_IDLE_TIMEOUT_SECONDS
    )
    monitor_fullscreen_slideshow: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    banners: Mapped[list[Banner]] = relationship(
        "Banner", back_populates="store", cascade="all, delete-orphan", order_by="Banner.order"
    )


class TillSession(Base):
    """A cash register period. `closed_at` is null while the till is open."""

    __tablename__ = "cash_register"
    __table_args__ = (
        Index("ix_cash_register_store_opened", "store_id", "opened_at"),
        Index("ix_cash_register_store_closed", "store_id", "closed_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False)
    opened_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    opened_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    initial_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    final_amount: Mapped[float | None] = mapped_column(Money, nullable=True)

    orders: Mapped[list[Order]] = relationship("Order", back_populates="till_session")

    @property
    def is_open(self) -> bool:
        return self.closed_at is None


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (Index("ix_customers_store_name", "store_id", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    addresses: Mapped[list[CustomerAddress]] = relationship(
        "CustomerAddress", back_populates="customer", order_by="CustomerAddress.name"
    )
    orders: Mapped[list[Order]] = relationship("Order", back_populates="customer")


class CustomerAddress(Base):
    __tablename__ = "customer_addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    neighborhood: Mapped[str] = mapped_column(String(120), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cep: Mapped[str | None] = mapped_column(String(16), nullable=True)

    customer: Mapped[Customer] = relationship("Customer", back_populates="addresses")


class LoyaltyTransaction(Base):
    __tablename__ = "loyalty_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, server_default=func.now(), nullable=False
    )


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_store_created", "store_id", "created_at"),
        Index("ix_orders_cash_register_id", "cash_register_id"),
        Index("ix_orders_customer_id", "customer_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False)
    order_number: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=OrderStatus.PENDING.value
    )
    total: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    payment_method: Mapped[str | None] = mapped_column(String(120), nullable=True)
    source: Mapped[str | None] = mapped_column(String(32), nullable=True)
    delivery: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pickup_time: Mapped[str | None] = mapped_column(String(16), nullable=True)
    reservation_date: Mapped[str | None] = mapped_column(String(16), nullable=True)
    cash_register_id: Mapped[int | None] = mapped_column(
        ForeignKey("cash_register.id"), nullable=True
    )
    customer_id: Mapped[int | None] = mapped_column(ForeignKey("customers.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    items: Mapped[list[OrderItem]] = relationship(
        "OrderItem", back_populates="order", order_by="OrderItem.id"
    )
    customer: Mapped[Customer | None] = relationship("Customer", back_populates="orders")
    till_session: Mapped[TillSession | None] = relationship(
        "TillSession", back_populates="orders"
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (Index("ix_order_items_order_id", "order_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    variation_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    product_price: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    subtotal: Mapped[float] = mapped_column(Money, nullable=False, default=0)

    order: Mapped[Order] = relationship("Order", back_populates="items")

    @property
    def display_name(self) -> str:
        if self.variation_name:
            return f"{self.product_name} ({self.variation_name})"
        return self.product_name


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[float] = mapped_column(Money, nullable=False, default=0)


class Supplier(Base):
    __tablename__ = "suppliers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False)
    corporate_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cnpj: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    whatsapp: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    products: Mapped[list[SupplierProduct]] = relationship(
        "SupplierProduct", back_populates="supplier", cascade="all, delete-orphan"
    )


class SupplierProduct(Base):
    __tablename__ = "supplier_products"
    __table_args__ = (UniqueConstraint("supplier_id", "product_id", name="uq_supplier_product"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    supplier_id: Mapped[int] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)
    cost_price: Mapped[float | None] = mapped_column(Money, nullable=True)

    supplier: Mapped[Supplier] = relationship("Supplier", back_populates="products")
    product: Mapped[Product] = relationship("Product")


class Banner(Base):
    __tablename__ = "banners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False, default=1)

    store: Mapped[Store] = relationship("Store", back_populates="banners")
