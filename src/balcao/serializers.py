"""
Serializers for consistent API responses.
"""

from datetime import datetime
from typing import Any

from balcao.models import (
    Banner,
    Customer,
    CustomerAddress,
    Order,
    OrderItem,
    Product,
    Store,
    Supplier,
    SupplierProduct,
    TillSession,
)


def _safe_float(value) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_till_session(till: TillSession) -> dict[str, Any]:
    return {
        "id": till.id,
        "store_id": till.store_id,
        "opened_by": till.opened_by,
        "opened_at": _iso(till.opened_at),
        "closed_at": _iso(till.closed_at),
        "initial_amount": _safe_float(till.initial_amount),
        "final_amount": None if till.final_amount is None else _safe_float(till.final_amount),
        "is_open": till.is_open,
    }


def serialize_order_item(item: OrderItem) -> dict[str, Any]:
    return {
        "product_name": item.product_name,
        "variation_name": item.variation_name,
        "display_name": item.display_name,
        "quantity": item.quantity,
        "product_price": _safe_float(item.product_price),
        "subtotal": _safe_float(item.subtotal),
    }


def serialize_order(order: Order, include_items: bool = True) -> dict[str, Any]:
    """Serialize Order model, with its customer and (optionally) line items."""
    payload = {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "total": _safe_float(order.total),
        "created_at": _iso(order.created_at),
        "payment_method": order.payment_method,
        "source": order.source,
        "delivery": order.delivery,
        "cash_register_id": order.cash_register_id,
        "customer": (
            {"name": order.customer.name, "phone": order.customer.phone}
            if order.customer
            else None
        ),
    }
    if include_items:
        payload["order_items"] = [serialize_order_item(item) for item in order.items]
    return payload


def serialize_reservation(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer_name": order.customer.name if order.customer else order.customer_name,
        "created_at": _iso(order.created_at),
        "pickup_time": order.pickup_time,
        "reservation_date": order.reservation_date,
    }


def serialize_customer(customer: Customer) -> dict[str, Any]:
    return {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "points": customer.points,
        "created_at": _iso(customer.created_at),
    }


def serialize_address(address: CustomerAddress) -> dict[str, Any]:
    return {
        "id": address.id,
        "customer_id": address.customer_id,
        "name": address.name,
        "address": address.address,
        "number": address.number,
        "neighborhood": address.neighborhood,
        "reference": address.reference,
        "cep": address.cep,
    }


def serialize_supplier(supplier: Supplier) -> dict[str, Any]:
    return {
        "id": supplier.id,
        "store_id": supplier.store_id,
        "corporate_name": supplier.corporate_name,
        "cnpj": supplier.cnpj,
        "address": supplier.address,
        "phone": supplier.phone,
        "whatsapp": supplier.whatsapp,
        "created_at": _iso(supplier.created_at),
        "updated_at": _iso(supplier.updated_at),
    }


def serialize_product(product: Product) -> dict[str, Any]:
    return {"id": product.id, "name": product.name, "price": _safe_float(product.price)}


def serialize_supplier_product(link: SupplierProduct) -> dict[str, Any]:
    return {
        "id": link.id,
        "supplier_id": link.supplier_id,
        "product_id": link.product_id,
        "cost_price": None if link.cost_price is None else _safe_float(link.cost_price),
        "products": serialize_product(link.product) if link.product else None,
    }


def serialize_banner(banner: Banner) -> dict[str, Any]:
    return {"id": banner.id, "url": banner.url, "order": banner.order}


def serialize_store(store: Store) -> dict[str, Any]:
    return {
        "id": store.id,
        "name": store.name,
        "display_name": store.display_name or store.name,
        "slug": store.slug,
        "is_active": store.is_active if store.is_active is not None else True,
        "image_url": store.image_url,
        "ifood_stock_alert_enabled": bool(store.ifood_stock_alert_enabled),
        "ifood_stock_alert_threshold": store.ifood_stock_alert_threshold or 0,
        "whatsapp_ai_enabled": bool(store.whatsapp_ai_enabled),
        "whatsapp_ai_api_key": store.whatsapp_ai_api_key,
    }


def success_response(data: Any, message: str | None = None) -> dict[str, Any]:
    """Create a standardized success response."""
    response = {"status": "success", "data": data, "error": None}
    if message:
        response["message"] = message
    return response


def error_response(error: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a standardized error response."""
    response = {"status": "error", "data": None, "error": error}
    if details:
        response["details"] = details
    return response
