from __future__ import annotations

from typing import Final

import structlog

from contact_engagement.adapters.notifiers.base import BaseNotifier
from contact_engagement.core.domain.entities.messaging_entity import (
    ChannelEntity,
    DeliveryReceipt,
    TicketEntity,
)
from contact_engagement.core.domain.events.exceptions import (
    ChannelUnavailableError,
    RejectedError,
)
from contact_engagement.core.domain.ports.notification_sender import NotificationSender

log = structlog.get_logger()


class WhatsappGatewaySender(BaseNotifier, NotificationSender):
    """
    Envio de texto pelo gateway WhatsApp, uma instância do gateway por
    conexão (`channel.name`).
    """

    _DEFAULT_OPTIONS: Final[dict] = {
        "delay": 1200,
        "presence": "composing",
        "linkPreview": False,
    }

    def __init__(self, apikey: str, endpoint: str, *, timeout: float | None = None) -> None:
        super().__init__("whatsapp-gateway", "whatsapp", timeout=timeout)
        self._apikey = apikey
        self._endpoint = endpoint.rstrip("/")

    # ------------------------------------------------------------------
    # implementação da PORTA
    # ------------------------------------------------------------------
    def send(self, channel: ChannelEntity, ticket: TicketEntity, body: str) -> DeliveryReceipt:
        if not channel.is_connected:
            raise ChannelUnavailableError(f"Conexão {channel.id} está {channel.status}")
        if not ticket.contact_number:
            raise RejectedError(f"Ticket {ticket.id} sem número de destino")

        resp = self._request(
            "POST",
            f"{self._endpoint}/message/sendText/{channel.name}",
            json={
                "number": ticket.contact_number,
                "options": self._DEFAULT_OPTIONS,
                "textMessage": {"text": body},
            },
            headers={
                "apikey": self._apikey,
                "Content-Type": "application/json",
            },
        )
        delivery_id = self._extract_delivery_id(resp)
        log.info("whatsapp.sent", provider=self.provider, channel_id=channel.id, ticket_id=ticket.id)
        return DeliveryReceipt(delivery_id=delivery_id)

    @staticmethod
    def _extract_delivery_id(resp) -> str | None:
        try:
            data = resp.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        key = data.get("key")
        if isinstance(key, dict) and key.get("id"):
            return str(key["id"])
        return str(data["id"]) if data.get("id") else None
