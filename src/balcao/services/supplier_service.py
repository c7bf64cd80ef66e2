"""
Supplier registry and the products each supplier provides.
"""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from balcao.db import get_session
from balcao.errors import ConflictError, NotFoundError, RetrievalError, WriteError
from balcao.logging_config import get_logger
from balcao.models import Product, Supplier, SupplierProduct
from balcao.validation import ValidationError, optional_text, parse_optional_amount, require

logger = get_logger(__name__)

OPTIONAL_FIELDS = ("cnpj", "address", "phone", "whatsapp")


def _get_supplier(db: Session, store_id: int, supplier_id: int) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None or supplier.store_id != store_id:
        raise NotFoundError("Fornecedor não encontrado")
    return supplier


def _supplier_values(payload: dict) -> dict:
    values = {
        "corporate_name": require(
            payload.get("corporate_name"), "A razão social é obrigatória."
        )
    }
    for key in OPTIONAL_FIELDS:
        values[key] = optional_text(payload.get(key))
    return values


def list_suppliers(store_id: int, search: str | None = None) -> list[Supplier]:
    stmt = select(Supplier).where(Supplier.store_id == store_id)
    term = (search or "").strip()
    if term:
        stmt = stmt.where(
            or_(
                func.lower(Supplier.corporate_name).contains(term.lower()),
                Supplier.cnpj.contains(term),
                Supplier.phone.contains(term),
            )
        )
    try:
        with get_session() as db:
            return list(db.execute(stmt.order_by(Supplier.corporate_name)).scalars())
    except SQLAlchemyError as exc:
        logger.error("Error loading suppliers for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar fornecedores") from exc


def create_supplier(store_id: int, payload: dict) -> Supplier:
    supplier = Supplier(store_id=store_id, **_supplier_values(payload))
    try:
        with get_session() as db:
            db.add(supplier)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error creating supplier for store %s: %s", store_id, exc)
        raise WriteError("Erro ao cadastrar fornecedor") from exc
    return supplier


def update_supplier(store_id: int, supplier_id: int, payload: dict) -> Supplier:
    values = _supplier_values(payload)
    try:
        with get_session() as db:
            supplier = _get_supplier(db, store_id, supplier_id)
            for key, value in values.items():
                setattr(supplier, key, value)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error updating supplier %s: %s", supplier_id, exc)
        raise WriteError("Erro ao atualizar fornecedor") from exc
    return supplier


def delete_supplier(store_id: int, supplier_id: int) -> None:
    """Delete a supplier; its product links go with it."""
    try:
        with get_session() as db:
            db.delete(_get_supplier(db, store_id, supplier_id))
    except SQLAlchemyError as exc:
        logger.error("Error deleting supplier %s: %s", supplier_id, exc)
        raise WriteError("Erro ao excluir fornecedor") from exc


def list_supplier_products(store_id: int, supplier_id: int) -> list[SupplierProduct]:
    try:
        with get_session() as db:
            _get_supplier(db, store_id, supplier_id)
            links = list(
                db.execute(
                    select(SupplierProduct)
                    .options(joinedload(SupplierProduct.product))
                    .where(SupplierProduct.supplier_id == supplier_id)
                ).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading products of supplier %s: %s", supplier_id, exc)
        raise RetrievalError("Erro ao carregar produtos do fornecedor") from exc
    return sorted(links, key=lambda link: link.product.name if link.product else "")


def add_supplier_product(
    store_id: int, supplier_id: int, product_id: int | None, cost_price=None
) -> SupplierProduct:
    if not product_id:
        raise ValidationError("Selecione um produto.")
    cost = parse_optional_amount(cost_price, "preço de custo")

    try:
        with get_session() as db:
            _get_supplier(db, store_id, supplier_id)
            product = db.get(Product, product_id)
            if product is None or product.store_id != store_id:
                raise NotFoundError("Produto não encontrado")
            existing = db.execute(
                select(SupplierProduct.id).where(
                    SupplierProduct.supplier_id == supplier_id,
                    SupplierProduct.product_id == product_id,
                )
            ).first()
            if existing:
                raise ConflictError("Este produto já está vinculado ao fornecedor.")
            link = SupplierProduct(
                supplier_id=supplier_id, product_id=product_id, cost_price=cost
            )
            link.product = product
            db.add(link)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error linking product %s to supplier %s: %s", product_id, supplier_id, exc)
        raise WriteError("Erro ao adicionar produto") from exc
    return link


def remove_supplier_product(store_id: int, supplier_id: int, link_id: int) -> None:
    try:
        with get_session() as db:
            _get_supplier(db, store_id, supplier_id)
            link = db.get(SupplierProduct, link_id)
            if link is None or link.supplier_id != supplier_id:
                raise NotFoundError("Produto do fornecedor não encontrado")
            db.delete(link)
    except SQLAlchemyError as exc:
        logger.error("Error removing supplier product %s: %s", link_id, exc)
        raise WriteError("Erro ao remover produto") from exc


def list_products(store_id: int) -> list[Product]:
    try:
        with get_session() as db:
            return list(
                db.execute(
                    select(Product).where(Product.store_id == store_id).order_by(Product.name)
                ).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading products for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar produtos") from exc
