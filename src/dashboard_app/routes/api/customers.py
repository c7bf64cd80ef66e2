"""
Customers API - customer registry and delivery addresses.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from balcao.schemas import AddressRequest, CustomerRequest
from balcao.serializers import serialize_address, serialize_customer, success_response
from balcao.services import customer_service

# Create blueprint without url_prefix (inherited from parent)
customers_bp = Blueprint("customers", __name__)


@customers_bp.get("/stores/<int:store_id>/customers")
def list_customers(store_id: int):
    """
    Listar clientes

    Query params:
        search: part of the name (any case) or of the phone
    """
    customers = customer_service.list_customers(store_id, request.args.get("search"))
    return jsonify(
        success_response({"customers": [serialize_customer(c) for c in customers]})
    ), HTTPStatus.OK


@customers_bp.post("/stores/<int:store_id>/customers")
def create_customer(store_id: int):
    payload = CustomerRequest(**(request.get_json(silent=True) or {}))
    customer = customer_service.create_customer(store_id, payload.name, payload.phone)
    return jsonify(
        success_response(serialize_customer(customer), "Cliente cadastrado")
    ), HTTPStatus.CREATED


@customers_bp.put("/stores/<int:store_id>/customers/<int:customer_id>")
def update_customer(store_id: int, customer_id: int):
    payload = CustomerRequest(**(request.get_json(silent=True) or {}))
    customer = customer_service.update_customer(
        store_id, customer_id, payload.name, payload.phone
    )
    return jsonify(
        success_response(serialize_customer(customer), "Cliente atualizado")
    ), HTTPStatus.OK


@customers_bp.delete("/stores/<int:store_id>/customers/<int:customer_id>")
def delete_customer(store_id: int, customer_id: int):
    """Deletes the customer with its orders, addresses and loyalty history."""
    customer_service.delete_customer(store_id, customer_id)
    return jsonify(success_response(None, "Cliente excluído")), HTTPStatus.OK


@customers_bp.get("/stores/<int:store_id>/customers/<int:customer_id>/addresses")
def list_addresses(store_id: int, customer_id: int):
    addresses = customer_service.list_addresses(store_id, customer_id)
    return jsonify(
        success_response({"addresses": [serialize_address(a) for a in addresses]})
    ), HTTPStatus.OK


@customers_bp.post("/stores/<int:store_id>/customers/<int:customer_id>/addresses")
def create_address(store_id: int, customer_id: int):
    payload = AddressRequest(**(request.get_json(silent=True) or {}))
    address = customer_service.create_address(store_id, customer_id, payload.model_dump())
    return jsonify(
        success_response(serialize_address(address), "Endereço salvo")
    ), HTTPStatus.CREATED


@customers_bp.put("/stores/<int:store_id>/customers/<int:customer_id>/addresses/<int:address_id>")
def update_address(store_id: int, customer_id: int, address_id: int):
    payload = AddressRequest(**(request.get_json(silent=True) or {}))
    address = customer_service.update_address(
        store_id, customer_id, address_id, payload.model_dump()
    )
    return jsonify(success_response(serialize_address(address), "Endereço salvo")), HTTPStatus.OK


@customers_bp.delete(
    "/stores/<int:store_id>/customers/<int:customer_id>/addresses/<int:address_id>"
)
def delete_address(store_id: int, customer_id: int, address_id: int):
    customer_service.delete_address(store_id, customer_id, address_id)
    return jsonify(success_response(None, "Endereço excluído")), HTTPStatus.OK
