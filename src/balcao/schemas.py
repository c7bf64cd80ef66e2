"""
Pydantic schemas for request validation.
"""

from pydantic import BaseModel, Field, validator

from balcao.constants import MoveDirection
from balcao.validation import validate_slug


class OpenTillRequest(BaseModel):
    # Parsed by validation.parse_amount so blank/negative input gets a clear message
    initial_amount: float | str | None = None
    opened_by: str | None = Field(None, max_length=255)


class CloseTillRequest(BaseModel):
    # Defaults to the store's current open till
    register_id: int | None = None


class LinkReservationsRequest(BaseModel):
    order_ids: list[int] = Field(default_factory=list)


class BannerRequest(BaseModel):
    url: str = ""


class MoveBannerRequest(BaseModel):
    direction: MoveDirection


class MonitorSettingsRequest(BaseModel):
    slideshow_delay: int = Field(5000, ge=0)
    idle_timeout_seconds: int = Field(30, ge=0)
    fullscreen_slideshow: bool = False


class StoreProfileRequest(BaseModel):
    display_name: str = Field("", max_length=255)
    slug: str = ""
    is_active: bool = True
    image_url: str = ""
    ifood_stock_alert_enabled: bool = False
    ifood_stock_alert_threshold: int = Field(0, ge=0)
    whatsapp_ai_enabled: bool | None = None
    whatsapp_ai_api_key: str | None = None

    @validator("slug")
    def validate_slug_value(cls, v):
        v = (v or "").strip()
        validate_slug(v)
        return v


class CustomerRequest(BaseModel):
    name: str = ""
    phone: str = ""


class AddressRequest(BaseModel):
    name: str = ""
    address: str = ""
    number: str | None = None
    neighborhood: str = ""
    reference: str | None = None
    cep: str | None = None
    skip_cep: bool = False


class SupplierRequest(BaseModel):
    corporate_name: str = ""
    cnpj: str | None = None
    address: str | None = None
    phone: str | None = None
    whatsapp: str | None = None


class SupplierProductRequest(BaseModel):
    product_id: int | None = None
    cost_price: float | str | None = None
