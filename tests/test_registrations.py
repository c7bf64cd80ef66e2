import pytest
from sqlalchemy import func, select

from balcao.db import get_session
from balcao.errors import ConflictError, NotFoundError
from balcao.models import (
    CustomerAddress,
    LoyaltyTransaction,
    Order,
    OrderItem,
    SupplierProduct,
)
from balcao.services import customer_service, supplier_service
from balcao.validation import ValidationError


def _count(model) -> int:
    with get_session() as db:
        return db.scalar(select(func.count()).select_from(model))


def test_customer_requires_name_and_phone(store) -> None:
    with pytest.raises(ValidationError, match="Nome e Telefone são obrigatórios."):
        customer_service.create_customer(store.id, "Ana", "  ")


def test_customer_search_by_name_or_phone(store) -> None:
    customer_service.create_customer(store.id, "Ana Souza", "11999990000")
    customer_service.create_customer(store.id, "Bruno Lima", "21988887777")

    assert [c.name for c in customer_service.list_customers(store.id)] == [
        "Ana Souza",
        "Bruno Lima",
    ]
    assert [c.name for c in customer_service.list_customers(store.id, "ANA")] == ["Ana Souza"]
    assert [c.name for c in customer_service.list_customers(store.id, "8888")] == ["Bruno Lima"]


def test_delete_customer_cascades(store, make_order) -> None:
    customer = customer_service.create_customer(store.id, "Ana", "119")
    customer_service.create_address(
        store.id, customer.id, {"name": "Casa", "address": "Rua A", "neighborhood": "Centro"}
    )
    with get_session() as db:
        db.add(LoyaltyTransaction(customer_id=customer.id, points=10, description="Compra"))
    make_order(customer_id=customer.id, items=(("Burger", None, 1), ("Suco", None, 2)))
    other = make_order()

    customer_service.delete_customer(store.id, customer.id)

    assert customer_service.list_customers(store.id) == []
    assert _count(CustomerAddress) == 0
    assert _count(LoyaltyTransaction) == 0
    with get_session() as db:
        assert db.scalars(select(Order.id)).all() == [other.id]
    assert _count(OrderItem) == 1


def test_address_skip_cep_stores_null(store) -> None:
    customer = customer_service.create_customer(store.id, "Ana", "119")

    address = customer_service.create_address(
        store.id,
        customer.id,
        {
            "name": "Trabalho",
            "address": "Av. Paulista",
            "neighborhood": "Bela Vista",
            "cep": "01310-100",
            "skip_cep": True,
            "number": " ",
        },
    )

    assert address.cep is None
    assert address.number is None
    with pytest.raises(ValidationError):
        customer_service.update_address(store.id, customer.id, address.id, {"name": "X"})


def test_supplier_crud_and_search(store) -> None:
    supplier = supplier_service.create_supplier(
        store.id, {"corporate_name": "Distribuidora Sul", "cnpj": "12.345", "phone": ""}
    )
    supplier_service.create_supplier(store.id, {"corporate_name": "Atacado Norte", "phone": "3133"})

    assert supplier.phone is None
    assert [s.corporate_name for s in supplier_service.list_suppliers(store.id)] == [
        "Atacado Norte",
        "Distribuidora Sul",
    ]
    assert [s.id for s in supplier_service.list_suppliers(store.id, "sul")] == [supplier.id]
    assert [s.corporate_name for s in supplier_service.list_suppliers(store.id, "313")] == [
        "Atacado Norte"
    ]

    updated = supplier_service.update_supplier(
        store.id, supplier.id, {"corporate_name": "Distribuidora Sul Ltda"}
    )
    assert updated.cnpj is None

    with pytest.raises(ValidationError):
        supplier_service.create_supplier(store.id, {"corporate_name": " "})


def test_supplier_products(store, make_product) -> None:
    supplier = supplier_service.create_supplier(store.id, {"corporate_name": "Distribuidora"})
    pao = make_product("Pão")
    carne = make_product("Carne")

    supplier_service.add_supplier_product(store.id, supplier.id, pao.id, "1.50")
    supplier_service.add_supplier_product(store.id, supplier.id, carne.id)

    links = supplier_service.list_supplier_products(store.id, supplier.id)
    assert [link.product.name for link in links] == ["Carne", "Pão"]
    assert [link.cost_price for link in links] == [None, 1.5]

    with pytest.raises(ConflictError):
        supplier_service.add_supplier_product(store.id, supplier.id, pao.id)
    with pytest.raises(ValidationError):
        supplier_service.add_supplier_product(store.id, supplier.id, None)

    supplier_service.remove_supplier_product(store.id, supplier.id, links[0].id)
    assert len(supplier_service.list_supplier_products(store.id, supplier.id)) == 1

    supplier_service.delete_supplier(store.id, supplier.id)
    assert _count(SupplierProduct) == 0
    with pytest.raises(NotFoundError):
        supplier_service.list_supplier_products(store.id, supplier.id)


def test_list_products_sorted(store, make_product) -> None:
    make_product("Refrigerante")
    make_product("Batata")

    assert [p.name for p in supplier_service.list_products(store.id)] == ["Batata", "Refrigerante"]
