"""
Store API - profile form, public links and logo upload.
"""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from balcao.schemas import StoreProfileRequest
from balcao.serializers import serialize_store, success_response
from balcao.services import store_profile_service
from balcao.supabase.storage import resolve_bucket
from balcao.validation import ValidationError

# Create blueprint without url_prefix (inherited from parent)
store_bp = Blueprint("store", __name__)


def _profile_payload(store) -> dict:
    return {
        "store": serialize_store(store),
        "links": store_profile_service.build_store_links(
            store.slug, current_app.config["PUBLIC_BASE_URL"]
        ),
    }


@store_bp.get("/stores/<int:store_id>/profile")
def get_profile(store_id: int):
    store = store_profile_service.get_store(store_id)
    return jsonify(success_response(_profile_payload(store))), HTTPStatus.OK


@store_bp.put("/stores/<int:store_id>/profile")
def update_profile(store_id: int):
    """
    Salvar dados da loja

    The slug is rejected with 400 before any write when it has characters
    other than lowercase letters, digits and hyphens.
    """
    payload = StoreProfileRequest(**(request.get_json(silent=True) or {}))
    store = store_profile_service.update_store(store_id, payload.model_dump())
    return jsonify(
        success_response(_profile_payload(store), "Dados da loja salvos")
    ), HTTPStatus.OK


@store_bp.post("/stores/<int:store_id>/profile/logo")
def upload_logo(store_id: int):
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError("Selecione uma imagem para enviar")

    store = store_profile_service.upload_store_logo(
        store_id,
        upload.filename,
        upload.read(),
        upload.mimetype,
        resolve_bucket("logo", current_app.config["BALCAO_CONFIG"]),
    )
    return jsonify(success_response(_profile_payload(store), "Logo atualizado")), HTTPStatus.OK
