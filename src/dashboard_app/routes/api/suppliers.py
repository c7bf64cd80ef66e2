"""
Suppliers API - supplier registry, supplied products and the product picker.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from balcao.schemas import SupplierProductRequest, SupplierRequest
from balcao.serializers import (
    serialize_product,
    serialize_supplier,
    serialize_supplier_product,
    success_response,
)
from balcao.services import supplier_service

# Create blueprint without url_prefix (inherited from parent)
suppliers_bp = Blueprint("suppliers", __name__)


@suppliers_bp.get("/stores/<int:store_id>/suppliers")
def list_suppliers(store_id: int):
    """
    Listar fornecedores

    Query params:
        search: part of the corporate name (any case), CNPJ or phone
    """
    suppliers = supplier_service.list_suppliers(store_id, request.args.get("search"))
    return jsonify(
        success_response({"suppliers": [serialize_supplier(s) for s in suppliers]})
    ), HTTPStatus.OK


@suppliers_bp.post("/stores/<int:store_id>/suppliers")
def create_supplier(store_id: int):
    payload = SupplierRequest(**(request.get_json(silent=True) or {}))
    supplier = supplier_service.create_supplier(store_id, payload.model_dump())
    return jsonify(
        success_response(serialize_supplier(supplier), "Fornecedor cadastrado")
    ), HTTPStatus.CREATED


@suppliers_bp.put("/stores/<int:store_id>/suppliers/<int:supplier_id>")
def update_supplier(store_id: int, supplier_id: int):
    payload = SupplierRequest(**(request.get_json(silent=True) or {}))
    supplier = supplier_service.update_supplier(store_id, supplier_id, payload.model_dump())
    return jsonify(
        success_response(serialize_supplier(supplier), "Fornecedor atualizado")
    ), HTTPStatus.OK


@suppliers_bp.delete("/stores/<int:store_id>/suppliers/<int:supplier_id>")
def delete_supplier(store_id: int, supplier_id: int):
    supplier_service.delete_supplier(store_id, supplier_id)
    return jsonify(success_response(None, "Fornecedor excluído")), HTTPStatus.OK


@suppliers_bp.get("/stores/<int:store_id>/suppliers/<int:supplier_id>/products")
def list_supplier_products(store_id: int, supplier_id: int):
    links = supplier_service.list_supplier_products(store_id, supplier_id)
    return jsonify(
        success_response({"products": [serialize_supplier_product(link) for link in links]})
    ), HTTPStatus.OK


@suppliers_bp.post("/stores/<int:store_id>/suppliers/<int:supplier_id>/products")
def add_supplier_product(store_id: int, supplier_id: int):
    payload = SupplierProductRequest(**(request.get_json(silent=True) or {}))
    link = supplier_service.add_supplier_product(
        store_id, supplier_id, payload.product_id, payload.cost_price
    )
    return jsonify(
        success_response(serialize_supplier_product(link), "Produto adicionado")
    ), HTTPStatus.CREATED


@suppliers_bp.delete("/stores/<int:store_id>/suppliers/<int:supplier_id>/products/<int:link_id>")
def remove_supplier_product(store_id: int, supplier_id: int, link_id: int):
    supplier_service.remove_supplier_product(store_id, supplier_id, link_id)
    return jsonify(success_response(None, "Produto removido")), HTTPStatus.OK


@suppliers_bp.get("/stores/<int:store_id>/products")
def list_products(store_id: int):
    products = supplier_service.list_products(store_id)
    return jsonify(
        success_response({"products": [serialize_product(p) for p in products]})
    ), HTTPStatus.OK
