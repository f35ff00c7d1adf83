from __future__ import annotations

from collections.abc import Sequence

import structlog

from contact_engagement.core.application.cancellation import CancellationToken
from contact_engagement.core.application.dtos.result_dtos import (
    BirthdayRunResult,
    DailyCycleResult,
    ReconciliationResult,
)
from contact_engagement.core.application.services.birthday_dispatcher import BirthdayDispatchScheduler
from contact_engagement.core.application.services.birthday_finder import BirthdayFinder
from contact_engagement.core.application.services.reconciliation_service import ReconciliationService
from contact_engagement.core.domain.entities.integration_entity import GESTAOCLICK_TYPE
from contact_engagement.core.domain.ports.announcement_sink import AnnouncementSink
from contact_engagement.core.domain.repositories.company_repository import CompanyRepository
from contact_engagement.core.domain.repositories.integration_repository import IntegrationRepository

logger = structlog.get_logger(__name__)

DEFAULT_CLEANUP_LIMIT = 500


class DailyCycleService:
    """
    Rotina diária: aniversários por empresa, depois reconciliação de cada
    integração, depois limpeza dos informativos vencidos.

    A falha de uma empresa ou integração fica só no resultado dela.
    """

    def __init__(  # noqa: PLR0913
        self,
        company_repo: CompanyRepository,
        integration_repo: IntegrationRepository,
        finder: BirthdayFinder,
        scheduler: BirthdayDispatchScheduler,
        reconciliation: ReconciliationService,
        announcements: AnnouncementSink,
        *,
        integration_types: Sequence[str] = (GESTAOCLICK_TYPE,),
        cleanup_limit: int = DEFAULT_CLEANUP_LIMIT,
    ) -> None:
        self.company_repo = company_repo
        self.integration_repo = integration_repo
        self.finder = finder
        self.scheduler = scheduler
        self.reconciliation = reconciliation
        self.announcements = announcements
        self.integration_types = tuple(integration_types)
        self.cleanup_limit = cleanup_limit

    def run(self, cancel_token: CancellationToken | None = None) -> DailyCycleResult:
        token = cancel_token or CancellationToken()
        today = self.finder.today()
        result = DailyCycleResult(day=today.isoformat())
        logger.info("cycle.start", day=result.day)

        self._run_birthdays(today, token, result)
        if not result.cancelled:
            self._run_reconciliations(token, result)
        if not result.cancelled:
            result.announcements_removed = self._clean_announcements()

        logger.info(
            "cycle.end",
            day=result.day,
            tenants=len(result.birthdays),
            integrations=len(result.reconciliations),
            users_announced=result.users_announced,
            contacts_notified=result.contacts_notified,
            contacts_skipped_dedup=result.contacts_skipped_dedup,
            announcements_removed=result.announcements_removed,
            cancelled=result.cancelled,
        )
        return result

    # ------------------------------------------------------------------ aniversários
    def _run_birthdays(self, today, token: CancellationToken, result: DailyCycleResult) -> None:
        try:
            company_ids = self.company_repo.list_active_ids()
        except Exception as exc:  # noqa: BLE001
            logger.error("cycle.list_companies_failed", error=str(exc), exc_info=True)
            return

        for company_id in company_ids:
            if token.cancelled:
                result.cancelled = True
                return
            run = self.run_birthdays_for_company(company_id, today, token)
            result.birthdays.append(run)
            if run.cancelled:
                result.cancelled = True
                return

    def run_birthdays_for_company(self, company_id: int, today, token: CancellationToken) -> BirthdayRunResult:
        try:
            settings = self.company_repo.get_birthday_settings(company_id)
            batch = self.finder.find_for_company(company_id, settings, today)
            if batch.is_empty:
                logger.debug("cycle.no_birthdays", company_id=company_id)
                return BirthdayRunResult(company_id=company_id)
            return self.scheduler.dispatch(batch, token)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "cycle.company_failed",
                company_id=company_id,
                error=str(exc),
                exc_info=True,
            )
            return BirthdayRunResult(company_id=company_id, error=str(exc) or exc.__class__.__name__)

    # ------------------------------------------------------------------ integrações
    def _run_reconciliations(self, token: CancellationToken, result: DailyCycleResult) -> None:
        for integration_type in self.integration_types:
            try:
                integrations = self.integration_repo.list_by_type(integration_type)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "cycle.list_integrations_failed",
                    integration_type=integration_type,
                    error=str(exc),
                    exc_info=True,
                )
                continue

            logger.info("cycle.integrations", integration_type=integration_type, total=len(integrations))
            for integration in integrations:
                if token.cancelled:
                    result.cancelled = True
                    return
                run: ReconciliationResult = self.reconciliation.run(integration, token)
                result.reconciliations.append(run)

    # ------------------------------------------------------------------ limpeza
    def _clean_announcements(self) -> int:
        try:
            removed = self.announcements.clean_expired(self.cleanup_limit)
        except Exception as exc:  # noqa: BLE001
            logger.error("cycle.announcement_cleanup_failed", error=str(exc), exc_info=True)
            return 0
        logger.info("cycle.announcements_removed", removed=removed, limit=self.cleanup_limit)
        return removed
