from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.messaging_entity import AnnouncementEntity
from contact_engagement.core.domain.entities.user_entity import UserEntity


class AnnouncementSink(ABC):
    @abstractmethod
    def create_for_tenant(
        self,
        source_company_id: int,
        target_company_id: int,
        subject: UserEntity,
    ) -> AnnouncementEntity:
        """Cria o informativo de aniversário de `subject` para a empresa alvo."""
        ...

    @abstractmethod
    def clean_expired(self, limit: int) -> int:
        """Remove até `limit` informativos expirados e devolve quantos removeu."""
        ...
