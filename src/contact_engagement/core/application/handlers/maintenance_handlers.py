from __future__ import annotations

import structlog

from contact_engagement.core.application.commands.reconciliation_commands import FixInvalidContactNamesCommand
from contact_engagement.core.application.cqrs import CommandHandler
from contact_engagement.core.application.dtos.result_dtos import FixNamesResult
from contact_engagement.core.domain.repositories.contact_repository import ContactRepository
from contact_engagement.core.utils.contact_name import (
    is_invalid_contact_name,
    resolve_best_contact_name,
)

logger = structlog.get_logger(__name__)


class FixInvalidContactNamesHandler(CommandHandler[FixInvalidContactNamesCommand]):
    """
    Corrige um lote de contatos cujo nome é artefato (número, placeholder
    `@lid`, id longo). O cursor entra e sai pelo comando/resultado; quem
    chama decide de onde continuar.
    """

    def __init__(self, contact_repo: ContactRepository):
        self.contact_repo = contact_repo

    def handle(self, cmd: FixInvalidContactNamesCommand) -> FixNamesResult:
        cursor = cmd.start_after
        processed = updated = 0
        try:
            contacts = self.contact_repo.list_after(cmd.start_after, max(1, cmd.batch_size))
        except Exception as exc:  # noqa: BLE001
            logger.error("fix_names.list_failed", start_after=cmd.start_after, error=str(exc), exc_info=True)
            return FixNamesResult(processed=0, updated=0, last_cursor=cursor)

        for contact in contacts:
            processed += 1
            cursor = max(cursor, contact.id)
            if not is_invalid_contact_name(contact.name):
                continue

            new_name = resolve_best_contact_name([contact.name], fallback_number=contact.number)
            if new_name == contact.name:
                continue
            try:
                self.contact_repo.update(contact.id, {"name": new_name})
            except Exception as exc:  # noqa: BLE001
                logger.error("fix_names.update_failed", contact_id=contact.id, error=str(exc), exc_info=True)
                continue
            updated += 1
            logger.debug("fix_names.updated", contact_id=contact.id)

        logger.info(
            "fix_names.batch_done",
            start_after=cmd.start_after,
            processed=processed,
            updated=updated,
            last_cursor=cursor,
        )
        return FixNamesResult(processed=processed, updated=updated, last_cursor=cursor)
