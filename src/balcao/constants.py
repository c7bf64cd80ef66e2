"""
Application constants and enums.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Statuses counted as "pending" on the dashboard cards
PENDING_ORDER_STATUSES = {OrderStatus.PENDING.value, OrderStatus.PREPARING.value}

# Reservations that can still be attached to a freshly opened till
NON_LINKABLE_STATUSES = {OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value}


class PaymentBucket(str, Enum):
    """
    Monetary buckets of the till summary.

    Member order is the matching priority: the first keyword contained in a
    payment label wins.
    """

    CASH = "dinheiro"
    PIX = "pix"
    CREDIT = "crédito"
    DEBIT = "débito"

    @property
    def display_name(self) -> str:
        return PAYMENT_BUCKET_DISPLAY_NAMES[self]


PAYMENT_BUCKET_DISPLAY_NAMES = {
    PaymentBucket.CASH: "Dinheiro",
    PaymentBucket.PIX: "PIX",
    PaymentBucket.CREDIT: "Crédito",
    PaymentBucket.DEBIT: "Débito",
}

LOYALTY_KEYWORD = "fidelidade"


@dataclass(frozen=True)
class PaymentLabel:
    """
    Parsed free-text payment method.

    `bucket` is None for labels matching none of the known keywords; such
    orders still count towards the grand total.
    """

    raw: str
    bucket: PaymentBucket | None
    is_loyalty: bool

    @classmethod
    def parse(cls, value: str | None) -> PaymentLabel:
        raw = value or ""
        lowered = raw.lower()
        bucket = next((member for member in PaymentBucket if member.value in lowered), None)
        return cls(raw=raw, bucket=bucket, is_loyalty=LOYALTY_KEYWORD in lowered)

    @property
    def is_other(self) -> bool:
        return self.bucket is None


class Channel(str, Enum):
    IN_PERSON = "presencial"
    TOTEM = "totem"
    WHATSAPP = "whatsapp"
    ONLINE_STORE = "loja_online"
    IFOOD = "ifood"

    @property
    def display_name(self) -> str:
        return CHANNEL_DISPLAY_NAMES[self]


CHANNEL_DISPLAY_NAMES = {
    Channel.IN_PERSON: "Presencial",
    Channel.TOTEM: "Totem",
    Channel.WHATSAPP: "WhatsApp",
    Channel.ONLINE_STORE: "Loja Online",
    Channel.IFOOD: "Ifood",
}


@dataclass(frozen=True)
class ChannelLabel:
    """
    Parsed order source.

    Absent sources default to in-person; unknown sources keep their literal
    text as display name.
    """

    raw: str
    channel: Channel | None

    @classmethod
    def parse(cls, value: str | None) -> ChannelLabel:
        raw = value or Channel.IN_PERSON.value
        try:
            channel = Channel(raw)
        except ValueError:
            channel = None
        return cls(raw=raw, channel=channel)

    @property
    def is_other(self) -> bool:
        return self.channel is None

    @property
    def display_name(self) -> str:
        if self.channel is None:
            return self.raw
        return self.channel.display_name


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


# Monitor (customer-facing screen) defaults
DEFAULT_MONITOR_SLIDESHOW_DELAY_MS = 5000
DEFAULT_MONITOR_IDLE_TIMEOUT_SECONDS = 30

SLUG_PATTERN = r"^[a-z0-9-]+$"
