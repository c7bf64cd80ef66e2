"""
Marketing API - monitor banners and slideshow settings.
"""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from balcao.schemas import BannerRequest, MonitorSettingsRequest, MoveBannerRequest
from balcao.serializers import serialize_banner, success_response
from balcao.services import marketing_service
from balcao.validation import ValidationError

# Create blueprint without url_prefix (inherited from parent)
marketing_bp = Blueprint("marketing", __name__)


def _banner_list(banners) -> dict:
    return {"banners": [serialize_banner(banner) for banner in banners]}


@marketing_bp.get("/stores/<int:store_id>/banners")
def list_banners(store_id: int):
    return jsonify(success_response(_banner_list(marketing_service.list_banners(store_id)))), HTTPStatus.OK


@marketing_bp.post("/stores/<int:store_id>/banners")
def add_banner(store_id: int):
    payload = BannerRequest(**(request.get_json(silent=True) or {}))
    banner = marketing_service.add_banner(store_id, payload.url)
    return jsonify(
        success_response(serialize_banner(banner), "Banner adicionado")
    ), HTTPStatus.CREATED


@marketing_bp.put("/stores/<int:store_id>/banners/<int:banner_id>")
def update_banner(store_id: int, banner_id: int):
    payload = BannerRequest(**(request.get_json(silent=True) or {}))
    banner = marketing_service.update_banner(store_id, banner_id, payload.url)
    return jsonify(success_response(serialize_banner(banner), "Banner atualizado")), HTTPStatus.OK


@marketing_bp.delete("/stores/<int:store_id>/banners/<int:banner_id>")
def delete_banner(store_id: int, banner_id: int):
    marketing_service.delete_banner(store_id, banner_id)
    return jsonify(success_response(None, "Banner excluído")), HTTPStatus.OK


@marketing_bp.post("/stores/<int:store_id>/banners/<int:banner_id>/move")
def move_banner(store_id: int, banner_id: int):
    """
    Mover banner

    Body:
        {"direction": "up" | "down"}
    """
    payload = MoveBannerRequest(**(request.get_json(silent=True) or {}))
    banners = marketing_service.move_banner(store_id, banner_id, payload.direction)
    return jsonify(success_response(_banner_list(banners))), HTTPStatus.OK


@marketing_bp.post("/stores/<int:store_id>/banners/upload")
def upload_banner(store_id: int):
    """Multipart upload (field `file`) to Supabase Storage."""
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError("Selecione uma imagem para enviar")

    banner = marketing_service.upload_banner_image(
        store_id,
        upload.filename,
        upload.read(),
        upload.mimetype,
        current_app.config["STORAGE_BUCKET_BANNERS"],
    )
    return jsonify(
        success_response(serialize_banner(banner), "Imagem enviada")
    ), HTTPStatus.CREATED


@marketing_bp.get("/stores/<int:store_id>/monitor-settings")
def get_monitor_settings(store_id: int):
    return jsonify(success_response(marketing_service.get_monitor_settings(store_id))), HTTPStatus.OK


@marketing_bp.put("/stores/<int:store_id>/monitor-settings")
def save_monitor_settings(store_id: int):
    payload = MonitorSettingsRequest(**(request.get_json(silent=True) or {}))
    settings = marketing_service.save_monitor_settings(
        store_id,
        payload.slideshow_delay,
        payload.idle_timeout_seconds,
        payload.fullscreen_slideshow,
    )
    return jsonify(success_response(settings, "Configurações salvas")), HTTPStatus.OK
