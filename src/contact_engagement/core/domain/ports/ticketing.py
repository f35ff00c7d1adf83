from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.contact_entity import ContactEntity
from contact_engagement.core.domain.entities.messaging_entity import ChannelEntity, TicketEntity


class Ticketing(ABC):
    @abstractmethod
    def find_or_create_ticket(self, contact: ContactEntity, channel: ChannelEntity) -> TicketEntity:
        ...

    @abstractmethod
    def record_message(
        self,
        ticket_id: int,
        body: str,
        delivery_id: str,
        direction: str = "outbound",
    ) -> None:
        """Registra a mensagem enviada no histórico da conversa."""
        ...
