from __future__ import annotations

from dataclasses import replace

import structlog

from contact_engagement.core.application.commands.reconciliation_commands import (
    PingIntegrationCommand,
    SyncIntegrationCommand,
    TestIntegrationContactCommand,
)
from contact_engagement.core.application.cqrs import CommandHandler
from contact_engagement.core.application.dtos.integration_dtos import IntegrationCredentials
from contact_engagement.core.application.dtos.result_dtos import (
    ContactTestResult,
    PingResult,
    RecordDecision,
    SyncIntegrationResult,
)
from contact_engagement.core.application.services.contact_reconciler import ContactReconciler
from contact_engagement.core.application.services.reconciliation_service import (
    ReconciliationService,
    SourceFactory,
)
from contact_engagement.core.domain.entities.contact_entity import ExternalRecord
from contact_engagement.core.domain.entities.integration_entity import (
    GESTAOCLICK_TYPE,
    IntegrationEntity,
)
from contact_engagement.core.domain.events.exceptions import (
    EngagementError,
    ExternalApiError,
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    UnreachableError,
)
from contact_engagement.core.domain.ports.external_contact_source import ExternalContactSource
from contact_engagement.core.domain.repositories.integration_repository import IntegrationRepository
from contact_engagement.core.utils.normalizers import parse_birth_date
from contact_engagement.core.utils.phone_utils import local_subscriber_digits, normalize_phone

logger = structlog.get_logger(__name__)

DEFAULT_PROBE_MAX_PAGES = 5

MSG_NOT_FOUND = "Integração não encontrada."
MSG_WRONG_TYPE = "Integração não é do tipo Gestao Click."


def describe_api_error(exc: Exception) -> str:
    """Mensagem legível para o operador a partir de uma falha da API externa."""
    if isinstance(exc, UnauthorizedError):
        return "Tokens inválidos ou sem permissão."
    if isinstance(exc, RateLimitedError):
        return "Limite de requisições atingido."
    if isinstance(exc, UnreachableError):
        return "Falha ao conectar na API."
    if isinstance(exc, EngagementError):
        return str(exc)
    return f"Erro inesperado: {exc}"


def load_gestaoclick_integration(
    repo: IntegrationRepository,
    integration_id: int,
    company_id: int,
) -> IntegrationEntity:
    integration = repo.find_by_id(integration_id, company_id)
    if integration is None:
        raise NotFoundError(MSG_NOT_FOUND)
    if integration.type != GESTAOCLICK_TYPE:
        raise InvalidInputError(MSG_WRONG_TYPE)
    return integration


class SyncIntegrationHandler(CommandHandler[SyncIntegrationCommand]):
    """Sincronização completa disparada pelo operador para uma integração."""

    def __init__(self, integration_repo: IntegrationRepository, reconciliation: ReconciliationService):
        self.integration_repo = integration_repo
        self.reconciliation = reconciliation

    def handle(self, cmd: SyncIntegrationCommand) -> SyncIntegrationResult:
        try:
            integration = load_gestaoclick_integration(self.integration_repo, cmd.integration_id, cmd.company_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("sync.rejected", integration_id=cmd.integration_id, error=str(exc))
            return SyncIntegrationResult(ok=False, message=describe_api_error(exc), last_error=str(exc))

        result = self.reconciliation.run(integration)
        if not result.ok:
            return SyncIntegrationResult(
                ok=False,
                message=f"Sincronização falhou: {result.last_error}",
                updated_count=result.touched,
                last_error=result.last_error,
                last_sync_at=result.last_sync_at,
            )
        return SyncIntegrationResult(
            ok=True,
            message=f"Sincronização concluída. Contatos atualizados: {result.touched}",
            updated_count=result.touched,
            last_sync_at=result.last_sync_at,
        )


class PingIntegrationHandler(CommandHandler[PingIntegrationCommand]):
    def __init__(self, integration_repo: IntegrationRepository, source_factory: SourceFactory):
        self.integration_repo = integration_repo
        self.source_factory = source_factory

    def handle(self, cmd: PingIntegrationCommand) -> PingResult:
        try:
            integration = load_gestaoclick_integration(self.integration_repo, cmd.integration_id, cmd.company_id)
            credentials = IntegrationCredentials.from_json_content(integration.json_content)
            self.source_factory(credentials).ping()
        except Exception as exc:  # noqa: BLE001
            logger.warning("ping.failed", integration_id=cmd.integration_id, error=str(exc))
            return PingResult(ok=False, message=describe_api_error(exc))
        return PingResult(ok=True, message="Conexão com a Gestao Click validada.")


class TestIntegrationContactHandler(CommandHandler[TestIntegrationContactCommand]):
    """
    Reconcilia um único cliente, localizado pelo telefone, sem rodar a
    sincronização completa. Serve para o operador validar tokens e o
    mapeamento dos campos.

    Busca primeiro pelo filtro de telefone da API (só DDD + número) e aceita
    apenas correspondências exatas; se nada aparecer, varre no máximo
    `max_pages` páginas da listagem sem filtro.
    """

    __test__ = False  # evita coleta pelo pytest

    def __init__(
        self,
        integration_repo: IntegrationRepository,
        reconciler: ContactReconciler,
        source_factory: SourceFactory,
        *,
        max_pages: int = DEFAULT_PROBE_MAX_PAGES,
    ):
        self.integration_repo = integration_repo
        self.reconciler = reconciler
        self.source_factory = source_factory
        self.max_pages = max_pages

    def handle(self, cmd: TestIntegrationContactCommand) -> ContactTestResult:
        log = logger.bind(integration_id=cmd.integration_id, company_id=cmd.company_id)
        try:
            integration = load_gestaoclick_integration(self.integration_repo, cmd.integration_id, cmd.company_id)
            target = normalize_phone(cmd.test_number)
            if not target:
                return ContactTestResult(updated=False, created=False, message="Número de teste inválido.")

            credentials = IntegrationCredentials.from_json_content(integration.json_content)
            source = self.source_factory(credentials)
            record = self.find_record(source, target)
            if record is None:
                log.info("probe.not_found", phone=target)
                return ContactTestResult(updated=False, created=False, message="Cliente não encontrado na Gestao Click.")

            # o telefone testado é o que identifica o contato local
            outcome = self.reconciler.reconcile(
                integration.company_id,
                replace(record, raw_phone_candidates=(target,)),
            )
        except (ExternalApiError, InvalidInputError, NotFoundError) as exc:
            log.warning("probe.failed", error=str(exc), error_type=exc.__class__.__name__)
            return ContactTestResult(updated=False, created=False, message=describe_api_error(exc))
        except Exception as exc:  # noqa: BLE001
            log.error("probe.unexpected_error", error=str(exc), exc_info=True)
            return ContactTestResult(updated=False, created=False, message=describe_api_error(exc))

        log.info("probe.done", decision=outcome.decision.value, contact_id=outcome.contact_id)
        return self._to_result(outcome.decision, outcome.contact_id, record.external_id)

    # ------------------------------------------------------------------ busca
    def find_record(self, source: ExternalContactSource, target: str) -> ExternalRecord | None:
        filtered = source.list_by_phone_filter(local_subscriber_digits(target))
        match = self._best_match(filtered.records, target)
        if match is not None:
            return match

        page, total_pages = 1, 1
        while page <= min(total_pages, self.max_pages):
            ext_page = source.list_page(page)
            total_pages = ext_page.total_pages or total_pages
            match = self._best_match(ext_page.records, target)
            if match is not None:
                return match
            page += 1
        return None

    @staticmethod
    def _best_match(records: list[ExternalRecord], target: str) -> ExternalRecord | None:
        matches = [
            r for r in records
            if any(normalize_phone(raw) == target for raw in r.raw_phone_candidates)
        ]
        for record in matches:
            if parse_birth_date(record.raw_birth_date) is not None:
                return record
        return matches[0] if matches else None

    @staticmethod
    def _to_result(decision: RecordDecision, contact_id: int | None, external_id: str) -> ContactTestResult:
        if decision is RecordDecision.CREATED:
            return ContactTestResult(True, True, "Contato criado com sucesso.", contact_id, external_id)
        if decision is RecordDecision.UPDATED:
            return ContactTestResult(True, False, "Contato atualizado com sucesso.", contact_id, external_id)
        if decision is RecordDecision.UNCHANGED:
            return ContactTestResult(False, False, "Nenhuma atualização necessária.", contact_id, external_id)
        if decision is RecordDecision.SKIPPED_NO_BIRTH_DATE:
            return ContactTestResult(
                False, False, "Contato não encontrado e data de nascimento inválida.", None, external_id
            )
        return ContactTestResult(False, False, "Telefone inválido.", None, external_id)
