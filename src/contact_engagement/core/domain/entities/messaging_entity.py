from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from contact_engagement.core.domain.entities._base import EntityMixin

CHANNEL_CONNECTED = "CONNECTED"


@dataclass(slots=True)
class ChannelEntity(EntityMixin):
    """Conexão de saída (WhatsApp) de uma empresa."""

    id: int
    company_id: int
    name: str
    status: str = CHANNEL_CONNECTED
    is_default: bool = False
    channel: str = "whatsapp"

    @property
    def is_connected(self) -> bool:
        return self.status == CHANNEL_CONNECTED


@dataclass(slots=True)
class TicketEntity(EntityMixin):
    id: int
    company_id: int
    contact_id: int
    channel_id: int
    contact_number: str


@dataclass(frozen=True, slots=True)
class DeliveryReceipt:
    delivery_id: str | None


@dataclass(slots=True)
class AnnouncementEntity(EntityMixin):
    id: int
    source_company_id: int
    target_company_id: int
    title: str
    text: str
    expires_at: datetime | None = None
