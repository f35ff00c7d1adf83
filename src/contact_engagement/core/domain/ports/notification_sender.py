from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.messaging_entity import (
    ChannelEntity,
    DeliveryReceipt,
    TicketEntity,
)


class NotificationSender(ABC):
    @abstractmethod
    def send(self, channel: ChannelEntity, ticket: TicketEntity, body: str) -> DeliveryReceipt:
        """
        Entrega `body` ao contato do ticket pela conexão informada.

        Pode falhar com `ChannelUnavailableError`, `RejectedError` ou
        `TransientError`.
        """
        ...
