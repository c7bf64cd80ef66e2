import pytest

from balcao.errors import ConflictError, NotFoundError
from balcao.models import Store
from balcao.db import get_session
from balcao.services import store_profile_service
from balcao.validation import ValidationError


def test_update_store_normalizes_blank_fields(store) -> None:
    updated = store_profile_service.update_store(
        store.id,
        {
            "display_name": "Central Lanches",
            "slug": "",
            "image_url": "  ",
            "ifood_stock_alert_enabled": True,
            "ifood_stock_alert_threshold": "5",
        },
    )

    assert updated.slug is None
    assert updated.image_url is None
    assert updated.display_name == "Central Lanches"
    assert updated.ifood_stock_alert_threshold == 5


@pytest.mark.parametrize("slug", ["Central", "lanche central", "açaí", "loja_1"])
def test_invalid_slug_rejected_before_write(store, slug) -> None:
    with pytest.raises(ValidationError):
        store_profile_service.update_store(store.id, {"display_name": "Outro", "slug": slug})

    assert store_profile_service.get_store(store.id).display_name is None


def test_duplicate_slug_is_conflict(store) -> None:
    with get_session() as db:
        db.add(Store(name="Outra", slug="central"))

    with pytest.raises(ConflictError):
        store_profile_service.update_store(store.id, {"slug": "central"})


def test_whatsapp_fields_only_written_when_present(store) -> None:
    store_profile_service.update_store(
        store.id, {"whatsapp_ai_enabled": True, "whatsapp_ai_api_key": "sk-123"}
    )
    updated = store_profile_service.update_store(store.id, {"slug": "central-2"})

    assert updated.whatsapp_ai_enabled is True
    assert updated.whatsapp_ai_api_key == "sk-123"
    assert updated.slug == "central-2"


def test_get_store_missing() -> None:
    with pytest.raises(NotFoundError):
        store_profile_service.get_store(404)


def test_build_store_links() -> None:
    assert store_profile_service.build_store_links("central", "https://balcao.test/") == {
        "store_url": "https://balcao.test/loja/central",
        "monitor_url": "https://balcao.test/monitor/central",
    }
    assert store_profile_service.build_store_links(None, "https://balcao.test") == {
        "store_url": "https://balcao.test/loja",
        "monitor_url": "https://balcao.test/monitor",
    }
