from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from contact_engagement.core.domain.entities._base import EntityMixin

GESTAOCLICK_TYPE = "gestaoclick"


@dataclass(slots=True)
class IntegrationLedger:
    """Metadados persistidos da última execução de uma integração."""

    last_sync_at: datetime | None = None
    last_updated_count: int = 0
    last_error: str | None = None


@dataclass(slots=True)
class IntegrationEntity(EntityMixin):
    """
    Integração configurada por uma empresa.

    `json_content` é o blob cru salvo pela tela de configuração; ele só é
    interpretado via `IntegrationCredentials.from_json_content()`.
    """

    id: int
    company_id: int
    type: str
    json_content: str | None = None
    last_sync_at: datetime | None = None
    last_updated_count: int = 0
    last_error: str | None = None

    @property
    def ledger(self) -> IntegrationLedger:
        return IntegrationLedger(
            last_sync_at=self.last_sync_at,
            last_updated_count=self.last_updated_count,
            last_error=self.last_error,
        )

    def apply_ledger(self, ledger: IntegrationLedger) -> None:
        self.last_sync_at = ledger.last_sync_at
        self.last_updated_count = ledger.last_updated_count
        self.last_error = ledger.last_error
