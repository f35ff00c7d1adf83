from __future__ import annotations

import structlog

from contact_engagement.core.application.cancellation import CancellationToken
from contact_engagement.core.application.commands.cycle_commands import RunDailyCycleCommand
from contact_engagement.core.application.commands.reconciliation_commands import (
    FixInvalidContactNamesCommand,
    PingIntegrationCommand,
    SyncIntegrationCommand,
    TestIntegrationContactCommand,
)
from contact_engagement.core.application.cqrs import BaseService
from contact_engagement.core.application.dtos.result_dtos import (
    ContactTestResult,
    DailyCycleResult,
    FixNamesResult,
    PingResult,
    SyncIntegrationResult,
    TodayBirthdaysView,
)
from contact_engagement.core.application.queries.birthday_queries import ListTodayBirthdaysQuery

logger = structlog.get_logger(__name__)


class EngagementFacadeService(BaseService):
    """
    Fachada chamada pelo agendador, pela tela de integrações e pelos
    consumers. Cada método devolve um objeto de resultado.
    """

    # ------------------------------------------------ rotina diária
    def run_daily_cycle(self, cancel_token: CancellationToken | None = None) -> DailyCycleResult:
        return self.execute(RunDailyCycleCommand(cancel_token=cancel_token or CancellationToken()))

    # ------------------------------------------------ integrações
    def sync_integration(self, integration_id: int, company_id: int) -> SyncIntegrationResult:
        return self.execute(SyncIntegrationCommand(integration_id=integration_id, company_id=company_id))

    def test_integration_contact(self, integration_id: int, company_id: int, number: str) -> ContactTestResult:
        return self.execute(
            TestIntegrationContactCommand(
                integration_id=integration_id,
                company_id=company_id,
                test_number=number,
            )
        )

    def ping_integration(self, integration_id: int, company_id: int) -> PingResult:
        return self.execute(PingIntegrationCommand(integration_id=integration_id, company_id=company_id))

    # ------------------------------------------------ aniversários
    def list_today_birthdays(self, company_id: int) -> TodayBirthdaysView:
        return self.query(ListTodayBirthdaysQuery(company_id=company_id))

    # ------------------------------------------------ manutenção
    def fix_invalid_contact_names(self, batch_size: int = 200, start_after: int = 0) -> FixNamesResult:
        result = self.execute(FixInvalidContactNamesCommand(batch_size=batch_size, start_after=start_after))
        logger.info("facade.fix_names", processed=result.processed, last_cursor=result.last_cursor)
        return result
