"""
Store profile: public name, custom URL, logo and integration flags.
"""

from __future__ import annotations

import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from balcao.db import get_session
from balcao.errors import ConflictError, NotFoundError, RetrievalError, WriteError
from balcao.logging_config import get_logger
from balcao.models import Store
from balcao.supabase.storage import StorageUnavailable, SupabaseStorage
from balcao.validation import optional_text, validate_slug

logger = get_logger(__name__)


def get_store(store_id: int) -> Store:
    try:
        with get_session() as db:
            store = db.get(Store, store_id)
    except SQLAlchemyError as exc:
        logger.error("Error loading store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar dados da loja") from exc
    if store is None:
        raise NotFoundError("Loja não encontrada")
    return store


def update_store(store_id: int, payload: dict) -> Store:
    """
    Save the profile form.

    The slug is checked before anything is written. Blank slug and image are
    stored as NULL. WhatsApp assistant fields are only touched when present
    in the payload.
    """
    slug = optional_text(payload.get("slug"))
    validate_slug(slug)

    values = {
        "display_name": optional_text(payload.get("display_name")),
        "slug": slug,
        "is_active": bool(payload.get("is_active", True)),
        "image_url": optional_text(payload.get("image_url")),
        "ifood_stock_alert_enabled": bool(payload.get("ifood_stock_alert_enabled", False)),
        "ifood_stock_alert_threshold": int(payload.get("ifood_stock_alert_threshold") or 0),
    }
    if payload.get("whatsapp_ai_enabled") is not None:
        values["whatsapp_ai_enabled"] = bool(payload["whatsapp_ai_enabled"])
    if payload.get("whatsapp_ai_api_key") is not None:
        values["whatsapp_ai_api_key"] = optional_text(payload["whatsapp_ai_api_key"])

    try:
        with get_session() as db:
            store = db.get(Store, store_id)
            if store is None:
                raise NotFoundError("Loja não encontrada")
            for key, value in values.items():
                setattr(store, key, value)
            db.flush()
    except IntegrityError as exc:
        logger.warning("Slug %s already taken (store %s)", slug, store_id)
        raise ConflictError("Esta URL já está em uso por outra loja") from exc
    except SQLAlchemyError as exc:
        logger.error("Error saving store %s: %s", store_id, exc)
        raise WriteError("Erro ao salvar dados da loja") from exc

    logger.info("Store %s profile updated", store_id)
    return store


def build_store_links(slug: str | None, base_url: str) -> dict[str, str]:
    """Public storefront and monitor links shown next to the slug field."""
    base = base_url.rstrip("/")
    suffix = f"/{slug}" if slug else ""
    return {
        "store_url": f"{base}/loja{suffix}",
        "monitor_url": f"{base}/monitor{suffix}",
    }


def upload_store_logo(
    store_id: int, filename: str, content: bytes, content_type: str | None, bucket: str
) -> Store:
    """Upload a logo to Supabase Storage and point the store image at it."""
    if not content:
        raise WriteError("Arquivo de imagem vazio")

    extension = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else "png"
    path = f"{store_id}/logo-{uuid.uuid4().hex}.{extension}"
    try:
        SupabaseStorage.upload_bytes(bucket, path, content, content_type)
    except StorageUnavailable as exc:
        raise WriteError("Armazenamento de imagens indisponível") from exc
    except Exception as exc:
        logger.error("Error uploading logo for store %s: %s", store_id, exc)
        raise WriteError("Erro ao enviar imagem") from exc

    public_url = SupabaseStorage.get_public_url(bucket, path)
    try:
        with get_session() as db:
            store = db.get(Store, store_id)
            if store is None:
                raise NotFoundError("Loja não encontrada")
            store.image_url = public_url
    except SQLAlchemyError as exc:
        logger.error("Error saving logo for store %s: %s", store_id, exc)
        raise WriteError("Erro ao salvar dados da loja") from exc
    return store
