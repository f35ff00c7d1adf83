from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from zoneinfo import ZoneInfo

import structlog

from contact_engagement.core.domain.entities.birthday_entity import (
    BirthdayBatch,
    BirthdayCandidate,
    BirthdaySettings,
    RecipientKind,
)
from contact_engagement.core.domain.ports.dedup_store import DedupStore
from contact_engagement.core.domain.repositories.contact_repository import ContactRepository
from contact_engagement.core.domain.repositories.user_repository import UserRepository
from contact_engagement.core.utils.normalizers import matches_day

logger = structlog.get_logger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"


def birthday_dedup_key(company_id: int, contact_id: int, day: date) -> str:
    return f"birthday:sent:{company_id}:{contact_id}:{day:%Y%m%d}"


def nominal_age(birth_date: date, today: date) -> int:
    """Idade "do dia": não importa se o horário do nascimento já passou."""
    return today.year - birth_date.year


class BirthdayFinder:
    """
    Encontra os aniversariantes do dia de um tenant.

    "Hoje" é sempre resolvido no fuso de referência, nunca no horário
    local do servidor.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        contact_repo: ContactRepository,
        dedup_store: DedupStore,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[ZoneInfo], datetime] | None = None,
    ) -> None:
        self.user_repo = user_repo
        self.contact_repo = contact_repo
        self.dedup_store = dedup_store
        self.tz = ZoneInfo(timezone)
        self._clock = clock or (lambda tz: datetime.now(tz))

    def today(self) -> date:
        return self._clock(self.tz).date()

    def _local_date(self, value: date) -> date:
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.tz)
            return value.date()
        return value

    def find_for_company(
        self,
        company_id: int,
        settings: BirthdaySettings,
        today: date | None = None,
    ) -> BirthdayBatch:
        today = today or self.today()
        batch = BirthdayBatch(company_id=company_id, day=today, settings=settings)

        if settings.user_birthday_enabled:
            batch.users = self._find_users(company_id, today)
        if settings.contact_birthday_enabled:
            batch.contacts = self._find_contacts(company_id, today)

        logger.info(
            "birthday.found",
            company_id=company_id,
            day=today.isoformat(),
            users=len(batch.users),
            contacts=len(batch.contacts),
        )
        return batch

    # ------------------------------------------------------------------ internos
    def _find_users(self, company_id: int, today: date) -> list[BirthdayCandidate]:
        candidates = []
        for user in self.user_repo.list_with_birth_date(company_id):
            if not user.birth_date:
                continue
            born = self._local_date(user.birth_date)
            if not matches_day(born, today):
                continue
            candidates.append(
                BirthdayCandidate(
                    recipient_id=user.id,
                    kind=RecipientKind.USER,
                    company_id=company_id,
                    name=user.name,
                    age=nominal_age(born, today),
                    birth_date=born,
                )
            )
        return candidates

    def _find_contacts(self, company_id: int, today: date) -> list[BirthdayCandidate]:
        candidates = []
        for contact in self.contact_repo.list_active_with_birth_date(company_id):
            if not contact.active or not contact.birth_date:
                continue
            born = self._local_date(contact.birth_date)
            if not matches_day(born, today):
                continue
            candidates.append(
                BirthdayCandidate(
                    recipient_id=contact.id,
                    kind=RecipientKind.CONTACT,
                    company_id=company_id,
                    name=contact.name,
                    age=nominal_age(born, today),
                    birth_date=born,
                    number=contact.number,
                    already_notified_today=self._already_notified(company_id, contact.id, today),
                )
            )
        return candidates

    def _already_notified(self, company_id: int, contact_id: int, today: date) -> bool:
        key = birthday_dedup_key(company_id, contact_id, today)
        try:
            return self.dedup_store.exists(key)
        except Exception as exc:  # noqa: BLE001
            # a reivindicação atômica no envio continua sendo a garantia real
            logger.error("birthday.dedup_check_failed", key=key, error=str(exc), exc_info=True)
            return False
