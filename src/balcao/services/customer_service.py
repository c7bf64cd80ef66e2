"""
Customer registry and delivery addresses.
"""

from __future__ import annotations

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from balcao.db import get_session
from balcao.errors import NotFoundError, RetrievalError, WriteError
from balcao.logging_config import get_logger
from balcao.models import Customer, CustomerAddress, LoyaltyTransaction, Order, OrderItem
from balcao.validation import optional_text, require

logger = get_logger(__name__)

REQUIRED_CUSTOMER_MESSAGE = "Nome e Telefone são obrigatórios."
REQUIRED_ADDRESS_MESSAGE = "Nome, Endereço e Bairro são obrigatórios."


def _get_customer(db: Session, store_id: int, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None or customer.store_id != store_id:
        raise NotFoundError("Cliente não encontrado")
    return customer


def list_customers(store_id: int, search: str | None = None) -> list[Customer]:
    """Customers by name; `search` matches the name (any case) or part of the phone."""
    stmt = select(Customer).where(Customer.store_id == store_id)
    term = (search or "").strip()
    if term:
        stmt = stmt.where(
            or_(
                func.lower(Customer.name).contains(term.lower()),
                Customer.phone.contains(term),
            )
        )
    try:
        with get_session() as db:
            return list(db.execute(stmt.order_by(Customer.name)).scalars())
    except SQLAlchemyError as exc:
        logger.error("Error loading customers for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar clientes") from exc


def create_customer(store_id: int, name: str | None, phone: str | None) -> Customer:
    name = require(name, REQUIRED_CUSTOMER_MESSAGE)
    phone = require(phone, REQUIRED_CUSTOMER_MESSAGE)
    customer = Customer(store_id=store_id, name=name, phone=phone, points=0)
    try:
        with get_session() as db:
            db.add(customer)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error creating customer for store %s: %s", store_id, exc)
        raise WriteError("Erro ao cadastrar cliente") from exc
    return customer


def update_customer(
    store_id: int, customer_id: int, name: str | None, phone: str | None
) -> Customer:
    name = require(name, REQUIRED_CUSTOMER_MESSAGE)
    phone = require(phone, REQUIRED_CUSTOMER_MESSAGE)
    try:
        with get_session() as db:
            customer = _get_customer(db, store_id, customer_id)
            customer.name = name
            customer.phone = phone
    except SQLAlchemyError as exc:
        logger.error("Error updating customer %s: %s", customer_id, exc)
        raise WriteError("Erro ao atualizar cliente") from exc
    return customer


def delete_customer(store_id: int, customer_id: int) -> None:
    """
    Remove a customer together with everything that references it.

    Order items of the customer's orders go first, then loyalty transactions,
    addresses and orders, and finally the customer row.
    """
    try:
        with get_session() as db:
            _get_customer(db, store_id, customer_id)
            order_ids = select(Order.id).where(Order.customer_id == customer_id)
            db.execute(delete(OrderItem).where(OrderItem.order_id.in_(order_ids)))
            db.execute(
                delete(LoyaltyTransaction).where(LoyaltyTransaction.customer_id == customer_id)
            )
            db.execute(delete(CustomerAddress).where(CustomerAddress.customer_id == customer_id))
            db.execute(delete(Order).where(Order.customer_id == customer_id))
            db.execute(delete(Customer).where(Customer.id == customer_id))
    except SQLAlchemyError as exc:
        logger.error("Error deleting customer %s: %s", customer_id, exc)
        raise WriteError("Erro ao excluir cliente") from exc
    logger.info("Customer %s deleted from store %s", customer_id, store_id)


def list_addresses(store_id: int, customer_id: int) -> list[CustomerAddress]:
    try:
        with get_session() as db:
            _get_customer(db, store_id, customer_id)
            return list(
                db.execute(
                    select(CustomerAddress)
                    .where(CustomerAddress.customer_id == customer_id)
                    .order_by(CustomerAddress.name)
                ).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading addresses of customer %s: %s", customer_id, exc)
        raise RetrievalError("Erro ao carregar endereços") from exc


def _address_values(payload: dict) -> dict:
    values = {
        "name": require(payload.get("name"), REQUIRED_ADDRESS_MESSAGE),
        "address": require(payload.get("address"), REQUIRED_ADDRESS_MESSAGE),
        "neighborhood": require(payload.get("neighborhood"), REQUIRED_ADDRESS_MESSAGE),
        "number": optional_text(payload.get("number")),
        "reference": optional_text(payload.get("reference")),
        "cep": optional_text(payload.get("cep")),
    }
    if payload.get("skip_cep"):
        values["cep"] = None
    return values


def create_address(store_id: int, customer_id: int, payload: dict) -> CustomerAddress:
    values = _address_values(payload)
    try:
        with get_session() as db:
            _get_customer(db, store_id, customer_id)
            address = CustomerAddress(customer_id=customer_id, **values)
            db.add(address)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error creating address for customer %s: %s", customer_id, exc)
        raise WriteError("Erro ao salvar endereço") from exc
    return address


def update_address(
    store_id: int, customer_id: int, address_id: int, payload: dict
) -> CustomerAddress:
    values = _address_values(payload)
    try:
        with get_session() as db:
            _get_customer(db, store_id, customer_id)
            address = db.get(CustomerAddress, address_id)
            if address is None or address.customer_id != customer_id:
                raise NotFoundError("Endereço não encontrado")
            for key, value in values.items():
                setattr(address, key, value)
    except SQLAlchemyError as exc:
        logger.error("Error updating address %s: %s", address_id, exc)
        raise WriteError("Erro ao salvar endereço") from exc
    return address


def delete_address(store_id: int, customer_id: int, address_id: int) -> None:
    try:
        with get_session() as db:
            _get_customer(db, store_id, customer_id)
            address = db.get(CustomerAddress, address_id)
            if address is None or address.customer_id != customer_id:
                raise NotFoundError("Endereço não encontrado")
            db.delete(address)
    except SQLAlchemyError as exc:
        logger.error("Error deleting address %s: %s", address_id, exc)
        raise WriteError("Erro ao excluir endereço") from exc
