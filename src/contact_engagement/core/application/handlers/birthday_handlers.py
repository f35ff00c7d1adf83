from __future__ import annotations

import structlog

from contact_engagement.core.application.commands.cycle_commands import RunDailyCycleCommand
from contact_engagement.core.application.cqrs import CommandHandler, QueryHandler
from contact_engagement.core.application.dtos.result_dtos import DailyCycleResult, TodayBirthdaysView
from contact_engagement.core.application.queries.birthday_queries import ListTodayBirthdaysQuery
from contact_engagement.core.application.services.birthday_finder import BirthdayFinder
from contact_engagement.core.application.services.daily_cycle_service import DailyCycleService
from contact_engagement.core.domain.repositories.company_repository import CompanyRepository

logger = structlog.get_logger(__name__)


class ListTodayBirthdaysHandler(QueryHandler[ListTodayBirthdaysQuery, TodayBirthdaysView]):
    """Aniversariantes de hoje de uma empresa, já com a marcação de quem foi notificado."""

    def __init__(self, company_repo: CompanyRepository, finder: BirthdayFinder):
        self.company_repo = company_repo
        self.finder = finder

    def handle(self, q: ListTodayBirthdaysQuery) -> TodayBirthdaysView:
        try:
            settings = self.company_repo.get_birthday_settings(q.company_id)
            batch = self.finder.find_for_company(q.company_id, settings)
        except Exception as exc:  # noqa: BLE001
            logger.error("birthday.list_failed", company_id=q.company_id, error=str(exc), exc_info=True)
            return TodayBirthdaysView(company_id=q.company_id, users=[], contacts=[])
        return TodayBirthdaysView(company_id=q.company_id, users=batch.users, contacts=batch.contacts)


class RunDailyCycleHandler(CommandHandler[RunDailyCycleCommand]):
    def __init__(self, cycle: DailyCycleService):
        self.cycle = cycle

    def handle(self, cmd: RunDailyCycleCommand) -> DailyCycleResult:
        return self.cycle.run(cmd.cancel_token)
