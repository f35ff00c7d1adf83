from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.messaging_entity import ChannelEntity


class ChannelRepository(ABC):
    @abstractmethod
    def find_connected(self, company_id: int, channel_id: int) -> ChannelEntity | None:
        """Retorna a conexão apenas se existir e estiver conectada."""
        ...

    @abstractmethod
    def get_default(self, company_id: int) -> ChannelEntity | None:
        """Conexão padrão da empresa."""
        ...
