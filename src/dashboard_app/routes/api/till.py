"""
Till API - opening, reconciliation, closing and export of cash register sessions.
"""

from http import HTTPStatus

from flask import Blueprint, Response, current_app, jsonify, request

from balcao.errors import ConflictError
from balcao.logging_config import get_logger
from balcao.schemas import CloseTillRequest, LinkReservationsRequest, OpenTillRequest
from balcao.serializers import (
    error_response,
    serialize_reservation,
    serialize_till_session,
    success_response,
)
from balcao.services import till_export_service, till_service

# Create blueprint without url_prefix (inherited from parent)
till_bp = Blueprint("till", __name__)
logger = get_logger(__name__)


@till_bp.get("/stores/<int:store_id>/till")
def get_current_till(store_id: int):
    """
    Current open till of the store, with its running summary.

    `session` is null when the till is closed.
    """
    till = till_service.get_open_session(store_id)
    if till is None:
        return jsonify(success_response({"session": None, "summary": None})), HTTPStatus.OK

    summary = till_service.compute_summary(till.id, store_id)
    return jsonify(
        success_response({"session": serialize_till_session(till), "summary": summary.to_dict()})
    ), HTTPStatus.OK


@till_bp.post("/stores/<int:store_id>/till/open")
def open_till(store_id: int):
    """
    Abrir caixa

    Body:
        {"initial_amount": "100.00", "opened_by": "Maria"}

    Returns the new session and the reservations that can be attached to it.
    """
    payload = OpenTillRequest(**(request.get_json(silent=True) or {}))

    if till_service.get_open_session(store_id) is not None:
        raise ConflictError("Já existe um caixa aberto")

    till = till_service.open_session(store_id, payload.initial_amount, payload.opened_by)
    reservations = till_service.list_linkable_orders(store_id)
    return jsonify(
        success_response(
            {
                "session": serialize_till_session(till),
                "reservations": [serialize_reservation(order) for order in reservations],
            },
            "Caixa aberto com sucesso",
        )
    ), HTTPStatus.CREATED


@till_bp.post("/stores/<int:store_id>/till/<int:register_id>/reservations")
def link_reservations(store_id: int, register_id: int):
    payload = LinkReservationsRequest(**(request.get_json(silent=True) or {}))
    linked = till_service.link_orders(store_id, register_id, payload.order_ids)
    return jsonify(success_response({"linked": linked})), HTTPStatus.OK


@till_bp.get("/stores/<int:store_id>/till/<int:register_id>/summary")
def get_till_summary(store_id: int, register_id: int):
    """Close preview for an open till, history detail for a closed one."""
    summary = till_service.get_session_detail(store_id, register_id)
    return jsonify(success_response(summary.to_dict())), HTTPStatus.OK


@till_bp.post("/stores/<int:store_id>/till/close")
def close_till(store_id: int):
    """
    Fechar caixa

    Body (optional):
        {"register_id": int}  defaults to the current open till

    A partial failure answers 500 with every step outcome in `details`.
    """
    payload = CloseTillRequest.model_validate(request.get_json(silent=True) or {})
    register_id = payload.register_id
    if register_id is None:
        till = till_service.get_open_session(store_id)
        if till is None:
            raise ConflictError("Nenhum caixa aberto")
        register_id = till.id

    result = till_service.close_session(store_id, register_id)
    if not result.ok:
        return jsonify(
            error_response("Erro ao fechar caixa", result.to_dict())
        ), HTTPStatus.INTERNAL_SERVER_ERROR

    return jsonify(
        success_response(result.to_dict(), "Caixa fechado com sucesso")
    ), HTTPStatus.OK


@till_bp.get("/stores/<int:store_id>/till/history")
def get_till_history(store_id: int):
    sessions = till_service.list_history(store_id)
    return jsonify(
        success_response({"sessions": [serialize_till_session(s) for s in sessions]})
    ), HTTPStatus.OK


@till_bp.get("/stores/<int:store_id>/till/<int:register_id>/export.csv")
def export_till_summary(store_id: int, register_id: int):
    """Download the reconciliation summary as CSV."""
    timezone_name = current_app.config["REPORT_TIMEZONE"]
    summary = till_service.compute_summary(register_id, store_id)
    content = till_export_service.export_summary(
        summary, timezone_name, current_app.config["CURRENCY_SYMBOL"]
    )
    filename = till_export_service.export_filename(summary, timezone_name)
    logger.info("Exporting summary of till %s as %s", register_id, filename)
    return Response(
        content.encode("utf-8"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
