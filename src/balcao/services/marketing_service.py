"""
Banners shown on the customer monitor and the monitor slideshow settings.
"""

from __future__ import annotations

import re
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from balcao.constants import (
    DEFAULT_MONITOR_IDLE_TIMEOUT_SECONDS,
    DEFAULT_MONITOR_SLIDESHOW_DELAY_MS,
    MoveDirection,
)
from balcao.db import get_session
from balcao.errors import NotFoundError, RetrievalError, WriteError
from balcao.logging_config import get_logger
from balcao.models import Banner, Store
from balcao.supabase.storage import StorageUnavailable, SupabaseStorage
from balcao.validation import require

logger = get_logger(__name__)

INVALID_URL_MESSAGE = "URL inválida: insira uma URL de imagem válida"


def list_banners(store_id: int) -> list[Banner]:
    try:
        with get_session() as db:
            return list(
                db.execute(
                    select(Banner)
                    .where(Banner.store_id == store_id)
                    .order_by(Banner.order.asc(), Banner.id.asc())
                ).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading banners for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar banners") from exc


def add_banner(store_id: int, url: str | None) -> Banner:
    """Append a banner at the end of the slideshow."""
    cleaned = require(url, INVALID_URL_MESSAGE)
    try:
        with get_session() as db:
            count = db.scalar(
                select(func.count(Banner.id)).where(Banner.store_id == store_id)
            )
            banner = Banner(store_id=store_id, url=cleaned, order=(count or 0) + 1)
            db.add(banner)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error adding banner for store %s: %s", store_id, exc)
        raise WriteError("Erro ao adicionar banner") from exc
    return banner


def update_banner(store_id: int, banner_id: int, url: str | None) -> Banner:
    cleaned = require(url, INVALID_URL_MESSAGE)
    try:
        with get_session() as db:
            banner = db.get(Banner, banner_id)
            if banner is None or banner.store_id != store_id:
                raise NotFoundError("Banner não encontrado")
            banner.url = cleaned
    except SQLAlchemyError as exc:
        logger.error("Error updating banner %s: %s", banner_id, exc)
        raise WriteError("Erro ao atualizar banner") from exc
    return banner


def delete_banner(store_id: int, banner_id: int) -> None:
    try:
        with get_session() as db:
            banner = db.get(Banner, banner_id)
            if banner is None or banner.store_id != store_id:
                raise NotFoundError("Banner não encontrado")
            db.delete(banner)
    except SQLAlchemyError as exc:
        logger.error("Error deleting banner %s: %s", banner_id, exc)
        raise WriteError("Erro ao excluir banner") from exc


def move_banner(store_id: int, banner_id: int, direction: MoveDirection | str) -> list[Banner]:
    """
    Swap a banner with its neighbour and renumber the two positions.

    Moving the first banner up or the last one down changes nothing. Each of
    the two position updates is a separate write.
    """
    direction = MoveDirection(direction)
    banners = list_banners(store_id)
    index = next((i for i, banner in enumerate(banners) if banner.id == banner_id), None)
    if index is None:
        raise NotFoundError("Banner não encontrado")

    new_index = index - 1 if direction is MoveDirection.UP else index + 1
    if new_index < 0 or new_index >= len(banners):
        return banners

    reordered = list(banners)
    reordered[index], reordered[new_index] = reordered[new_index], reordered[index]

    try:
        for position in (index, new_index):
            with get_session() as db:
                db.execute(
                    update(Banner)
                    .where(Banner.id == reordered[position].id)
                    .values(order=position + 1)
                )
    except SQLAlchemyError as exc:
        logger.error("Error reordering banner %s: %s", banner_id, exc)
        raise WriteError("Erro ao reordenar banner") from exc

    return list_banners(store_id)


def _safe_filename(filename: str) -> str:
    base = re.sub(r"[^A-Za-z0-9._-]+", "-", (filename or "banner").strip()).strip("-.")
    return base or "banner"


def upload_banner_image(
    store_id: int,
    filename: str,
    content: bytes,
    content_type: str | None,
    bucket: str,
) -> Banner:
    """Upload an image to Supabase Storage and append it as a banner."""
    if not content:
        raise WriteError("Arquivo de imagem vazio")

    path = f"{store_id}/{uuid.uuid4().hex}-{_safe_filename(filename)}"
    try:
        SupabaseStorage.upload_bytes(bucket, path, content, content_type)
    except StorageUnavailable as exc:
        raise WriteError("Armazenamento de imagens indisponível") from exc
    except Exception as exc:
        logger.error("Error uploading banner image for store %s: %s", store_id, exc)
        raise WriteError("Erro ao enviar imagem") from exc

    return add_banner(store_id, SupabaseStorage.get_public_url(bucket, path))


def get_monitor_settings(store_id: int) -> dict[str, int | bool]:
    try:
        with get_session() as db:
            store = db.get(Store, store_id)
            if store is None:
                raise NotFoundError("Loja não encontrada")
            return {
                "slideshow_delay": store.monitor_slideshow_delay
                or DEFAULT_MONITOR_SLIDESHOW_DELAY_MS,
                "idle_timeout_seconds": store.monitor_idle_timeout_seconds
                or DEFAULT_MONITOR_IDLE_TIMEOUT_SECONDS,
                "fullscreen_slideshow": bool(store.monitor_fullscreen_slideshow),
            }
    except SQLAlchemyError as exc:
        logger.error("Error loading monitor settings for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar configurações do monitor") from exc


def save_monitor_settings(
    store_id: int, slideshow_delay: int, idle_timeout_seconds: int, fullscreen_slideshow: bool
) -> dict[str, int | bool]:
    try:
        with get_session() as db:
            store = db.get(Store, store_id)
            if store is None:
                raise NotFoundError("Loja não encontrada")
            store.monitor_slideshow_delay = slideshow_delay
            store.monitor_idle_timeout_seconds = idle_timeout_seconds
            store.monitor_fullscreen_slideshow = fullscreen_slideshow
    except SQLAlchemyError as exc:
        logger.error("Error saving monitor settings for store %s: %s", store_id, exc)
        raise WriteError("Erro ao salvar configurações do monitor") from exc
    return get_monitor_settings(store_id)
