from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from contact_engagement.core.application.dtos.result_dtos import RecordDecision, RecordOutcome
from contact_engagement.core.domain.entities.contact_entity import ContactEntity, ExternalRecord
from contact_engagement.core.domain.repositories.contact_repository import ContactRepository
from contact_engagement.core.utils.normalizers import (
    looks_machine_generated,
    normalize_name,
    parse_birth_date,
    same_calendar_day,
)
from contact_engagement.core.utils.phone_utils import first_valid_phone

logger = structlog.get_logger(__name__)


class ContactReconciler:
    """
    Decide, registro a registro, se um cliente externo cria, atualiza ou não
    mexe em um contato local. Rodar duas vezes sobre os mesmos dados não gera
    escrita na segunda.
    """

    def __init__(
        self,
        contact_repo: ContactRepository,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.contact_repo = contact_repo
        self._now = now

    def reconcile(self, company_id: int, record: ExternalRecord) -> RecordOutcome:
        phone = first_valid_phone(record.raw_phone_candidates)
        if not phone:
            logger.debug("reconcile.skip_invalid_phone", external_id=record.external_id)
            return RecordOutcome(RecordDecision.SKIPPED_INVALID_PHONE)

        birth_date = parse_birth_date(record.raw_birth_date, now=self._now())
        name = normalize_name(record.raw_name)

        contact = self.contact_repo.find_by_phone(company_id, phone)
        if contact is None:
            return self._create(company_id, phone, name, birth_date, record)
        return self._update(contact, name, birth_date, record)

    # ------------------------------------------------------------------ internos
    def _create(
        self,
        company_id: int,
        phone: str,
        name: str,
        birth_date: datetime | None,
        record: ExternalRecord,
    ) -> RecordOutcome:
        # sem data de nascimento o contato não tem utilidade neste fluxo
        if birth_date is None:
            return RecordOutcome(RecordDecision.SKIPPED_NO_BIRTH_DATE, phone=phone)

        created = self.contact_repo.create(
            company_id=company_id,
            number=phone,
            name=name or phone,
            birth_date=birth_date,
        )
        logger.info(
            "reconcile.contact_created",
            company_id=company_id,
            contact_id=created.id,
            external_id=record.external_id,
        )
        return RecordOutcome(
            RecordDecision.CREATED,
            phone=phone,
            contact_id=created.id,
            changed_fields=("name", "number", "birth_date"),
        )

    def _update(
        self,
        contact: ContactEntity,
        name: str,
        birth_date: datetime | None,
        record: ExternalRecord,
    ) -> RecordOutcome:
        updates: dict = {}
        if birth_date and not same_calendar_day(contact.birth_date, birth_date):
            updates["birth_date"] = birth_date

        # só sobrescreve nomes gerados a partir do número, nunca nomes digitados
        if looks_machine_generated(contact.name) and name and contact.name != name:
            updates["name"] = name

        if not updates:
            return RecordOutcome(RecordDecision.UNCHANGED, phone=contact.number, contact_id=contact.id)

        self.contact_repo.update(contact.id, updates)
        logger.info(
            "reconcile.contact_updated",
            company_id=contact.company_id,
            contact_id=contact.id,
            external_id=record.external_id,
            fields=sorted(updates),
        )
        return RecordOutcome(
            RecordDecision.UPDATED,
            phone=contact.number,
            contact_id=contact.id,
            changed_fields=tuple(sorted(updates)),
        )
