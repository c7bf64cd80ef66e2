from unittest import mock

import pytest

from balcao.constants import MoveDirection
from balcao.errors import NotFoundError, WriteError
from balcao.services import marketing_service
from balcao.supabase.storage import StorageUnavailable, SupabaseStorage
from balcao.validation import ValidationError


def _urls(store_id) -> list[str]:
    return [banner.url for banner in marketing_service.list_banners(store_id)]


def test_add_banner_appends_with_trimmed_url(store) -> None:
    first = marketing_service.add_banner(store.id, "  https://cdn.test/a.png ")
    second = marketing_service.add_banner(store.id, "https://cdn.test/b.png")

    assert first.url == "https://cdn.test/a.png"
    assert (first.order, second.order) == (1, 2)


def test_add_banner_requires_url(store) -> None:
    with pytest.raises(ValidationError):
        marketing_service.add_banner(store.id, "   ")
    assert _urls(store.id) == []


def test_move_banner_swaps_neighbours(store) -> None:
    for name in ("a", "b", "c"):
        marketing_service.add_banner(store.id, f"https://cdn.test/{name}.png")
    middle = marketing_service.list_banners(store.id)[1]

    banners = marketing_service.move_banner(store.id, middle.id, MoveDirection.UP)

    assert [b.url for b in banners] == [
        "https://cdn.test/b.png",
        "https://cdn.test/a.png",
        "https://cdn.test/c.png",
    ]
    assert [b.order for b in banners] == [1, 2, 3]


def test_move_past_either_end_is_noop(store) -> None:
    first = marketing_service.add_banner(store.id, "https://cdn.test/a.png")
    last = marketing_service.add_banner(store.id, "https://cdn.test/b.png")

    marketing_service.move_banner(store.id, first.id, "up")
    marketing_service.move_banner(store.id, last.id, "down")

    assert _urls(store.id) == ["https://cdn.test/a.png", "https://cdn.test/b.png"]


def test_update_and_delete_banner(store) -> None:
    banner = marketing_service.add_banner(store.id, "https://cdn.test/a.png")

    marketing_service.update_banner(store.id, banner.id, "https://cdn.test/new.png")
    assert _urls(store.id) == ["https://cdn.test/new.png"]

    marketing_service.delete_banner(store.id, banner.id)
    assert _urls(store.id) == []

    with pytest.raises(NotFoundError):
        marketing_service.delete_banner(store.id, banner.id)


def test_upload_banner_image_adds_public_url(store) -> None:
    with mock.patch.object(SupabaseStorage, "upload_bytes") as upload:
        banner = marketing_service.upload_banner_image(
            store.id, "promo de verão.png", b"\x89PNG", "image/png", "banners"
        )

    bucket, path, content, content_type = upload.call_args.args
    assert bucket == "banners"
    assert path.startswith(f"{store.id}/") and path.endswith("-promo-de-ver-o.png")
    assert content == b"\x89PNG"
    assert banner.url == f"https://project.supabase.co/storage/v1/object/public/banners/{path}"


def test_upload_without_storage_is_write_error(store) -> None:
    with mock.patch.object(
        SupabaseStorage, "upload_bytes", side_effect=StorageUnavailable("no client")
    ):
        with pytest.raises(WriteError):
            marketing_service.upload_banner_image(store.id, "a.png", b"data", "image/png", "banners")
    assert _urls(store.id) == []


def test_monitor_settings_defaults_and_save(store) -> None:
    assert marketing_service.get_monitor_settings(store.id) == {
        "slideshow_delay": 5000,
        "idle_timeout_seconds": 30,
        "fullscreen_slideshow": False,
    }

    saved = marketing_service.save_monitor_settings(store.id, 8000, 45, True)

    assert saved == {"slideshow_delay": 8000, "idle_timeout_seconds": 45, "fullscreen_slideshow": True}
