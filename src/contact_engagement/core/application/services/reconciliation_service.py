from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import backoff
import structlog

from contact_engagement.core.application.cancellation import CancellationToken
from contact_engagement.core.application.dtos.integration_dtos import IntegrationCredentials
from contact_engagement.core.application.dtos.result_dtos import (
    RecordDecision,
    ReconciliationResult,
)
from contact_engagement.core.application.services.contact_reconciler import ContactReconciler
from contact_engagement.core.domain.entities.contact_entity import ExternalPage
from contact_engagement.core.domain.entities.integration_entity import (
    IntegrationEntity,
    IntegrationLedger,
)
from contact_engagement.core.domain.events.events import IntegrationSyncedEvent
from contact_engagement.core.domain.events.exceptions import (
    RateLimitedError,
    RunCancelledError,
    UnreachableError,
)
from contact_engagement.core.domain.ports.external_contact_source import ExternalContactSource
from contact_engagement.core.domain.repositories.integration_repository import IntegrationRepository
from contact_engagement.core.domain.services.event_dispatcher import EventDispatcher

logger = structlog.get_logger(__name__)

SourceFactory = Callable[[IntegrationCredentials], ExternalContactSource]

DEFAULT_PAGE_DELAY_SECONDS = 0.35
# teto de cada espera entre novas tentativas de busca de página
FETCH_RETRY_MAX_WAIT_SECONDS = 8.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReconciliationService:
    """
    Executa uma reconciliação completa (todas as páginas) de uma integração.

    Nunca lança exceção: qualquer falha interrompe as páginas restantes,
    vai para o ledger da integração (com o progresso parcial preservado)
    e volta em `ReconciliationResult.last_error`.
    """

    def __init__(  # noqa: PLR0913
        self,
        integration_repo: IntegrationRepository,
        reconciler: ContactReconciler,
        source_factory: SourceFactory,
        dispatcher: EventDispatcher,
        *,
        page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS,
        fetch_max_tries: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.integration_repo = integration_repo
        self.reconciler = reconciler
        self.source_factory = source_factory
        self.dispatcher = dispatcher
        self.page_delay_seconds = page_delay_seconds
        self.fetch_max_tries = max(1, fetch_max_tries)
        self._clock = clock

    # ------------------------------------------------------------------ público
    def run(
        self,
        integration: IntegrationEntity,
        cancel_token: CancellationToken | None = None,
    ) -> ReconciliationResult:
        token = cancel_token or CancellationToken()
        result = ReconciliationResult(integration_id=integration.id, company_id=integration.company_id)
        log = logger.bind(integration_id=integration.id, company_id=integration.company_id)
        log.info("reconcile.start")

        try:
            credentials = IntegrationCredentials.from_json_content(integration.json_content)
            source = self.source_factory(credentials)
            self._walk_pages(source, integration.company_id, result, token, log)
        except Exception as exc:  # noqa: BLE001
            result.last_error = str(exc) or exc.__class__.__name__
            log.error(
                "reconcile.failed",
                error=result.last_error,
                error_type=exc.__class__.__name__,
                processed=result.processed,
                updated=result.updated,
                created=result.created,
                exc_info=True,
            )

        result.last_sync_at = self._clock()
        self._persist_ledger(integration, result, log)
        self.dispatcher.dispatch(
            IntegrationSyncedEvent(
                integration_id=integration.id,
                company_id=integration.company_id,
                processed=result.processed,
                updated=result.updated,
                created=result.created,
                last_error=result.last_error,
            )
        )
        log.info(
            "reconcile.end",
            processed=result.processed,
            updated=result.updated,
            created=result.created,
            last_error=result.last_error,
        )
        return result

    # ------------------------------------------------------------------ internos
    def _walk_pages(
        self,
        source: ExternalContactSource,
        company_id: int,
        result: ReconciliationResult,
        token: CancellationToken,
        log,
    ) -> None:
        fetch_page = self._with_retry(source.list_page, token)
        page = 1
        total_pages = 1
        while True:
            if token.cancelled:
                raise RunCancelledError("Sincronização cancelada.")

            try:
                ext_page: ExternalPage = fetch_page(page)
            except (RateLimitedError, UnreachableError):
                if token.cancelled:
                    raise RunCancelledError("Sincronização cancelada.") from None
                raise
            # vale sempre o último total informado pela API
            total_pages = ext_page.total_pages or total_pages
            log.info(
                "reconcile.page_fetched",
                page=page,
                total_pages=total_pages,
                records=len(ext_page.records),
            )

            for record in ext_page.records:
                outcome = self.reconciler.reconcile(company_id, record)
                result.processed += 1
                if outcome.decision is RecordDecision.CREATED:
                    result.created += 1
                elif outcome.decision is RecordDecision.UPDATED:
                    result.updated += 1

            page += 1
            if page > total_pages:
                return
            if token.sleep(self.page_delay_seconds):
                raise RunCancelledError("Sincronização cancelada.")

    def _with_retry(self, fn, token: CancellationToken):
        """
        Repete a busca em `RateLimited`/`Unreachable`. A espera do backoff não
        é interrompível, mas é limitada e o token é consultado antes de cada
        tentativa e ao desistir.
        """
        if self.fetch_max_tries <= 1:
            return fn

        def attempt(page):
            if token.cancelled:
                raise RunCancelledError("Sincronização cancelada.")
            return fn(page)

        return backoff.on_exception(
            backoff.expo,
            (RateLimitedError, UnreachableError),
            max_tries=self.fetch_max_tries,
            max_value=FETCH_RETRY_MAX_WAIT_SECONDS,
            giveup=lambda _exc: token.cancelled,
            on_backoff=lambda details: logger.warning(
                "reconcile.fetch_retry",
                tries=details["tries"],
                wait=round(details["wait"], 2),
            ),
        )(attempt)

    def _persist_ledger(self, integration: IntegrationEntity, result: ReconciliationResult, log) -> None:
        ledger = IntegrationLedger(
            last_sync_at=result.last_sync_at,
            last_updated_count=result.touched,
            last_error=result.last_error,
        )
        try:
            self.integration_repo.update_ledger(integration.id, ledger)
            integration.apply_ledger(ledger)
        except Exception as exc:  # noqa: BLE001
            log.error("reconcile.ledger_failed", error=str(exc), exc_info=True)
            if result.last_error is None:
                result.last_error = f"Falha ao gravar o resultado da sincronização: {exc}"
