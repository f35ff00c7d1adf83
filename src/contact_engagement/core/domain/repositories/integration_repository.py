from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.integration_entity import (
    IntegrationEntity,
    IntegrationLedger,
)


class IntegrationRepository(ABC):
    @abstractmethod
    def find_by_id(self, integration_id: int, company_id: int) -> IntegrationEntity | None:
        """Retorna a integração se ela pertencer à empresa."""
        ...

    @abstractmethod
    def list_by_type(self, integration_type: str) -> list[IntegrationEntity]:
        """Todas as integrações configuradas de um tipo (todas as empresas)."""
        ...

    @abstractmethod
    def update_ledger(self, integration_id: int, ledger: IntegrationLedger) -> None:
        """Persiste `last_sync_at`, `last_updated_count` e `last_error`."""
        ...
