from datetime import date, datetime
from unittest import TestCase

from contact_engagement.core.application.commands.reconciliation_commands import (
    PingIntegrationCommand,
    SyncIntegrationCommand,
    TestIntegrationContactCommand,
)
from contact_engagement.core.application.handlers.sync_handlers import (
    PingIntegrationHandler,
    SyncIntegrationHandler,
    TestIntegrationContactHandler,
    describe_api_error,
)
from contact_engagement.core.application.services.contact_reconciler import ContactReconciler
from contact_engagement.core.application.services.reconciliation_service import ReconciliationService
from contact_engagement.core.domain.entities.integration_entity import GESTAOCLICK_TYPE, IntegrationEntity
from contact_engagement.core.domain.events.exceptions import (
    ExternalApiError,
    RateLimitedError,
    UnauthorizedError,
    UnreachableError,
)
from contact_engagement.core.domain.services.event_dispatcher import EventDispatcher
from tests.helpers.fakes import (
    FakeContactSource,
    InMemoryContactRepository,
    InMemoryIntegrationRepository,
    make_contact,
    make_record,
)

NOW = datetime(2024, 6, 1, 9, 0, 0)
CREDENTIALS = '{"gcAccessToken": "token-a", "gcSecretToken": "token-b", "gcBaseUrl": "https://crm.local/api/"}'


class _HandlerTestCase(TestCase):
    def setUp(self):
        self.contacts = InMemoryContactRepository()
        self.integrations = InMemoryIntegrationRepository([
            IntegrationEntity(id=1, company_id=3, type=GESTAOCLICK_TYPE, json_content=CREDENTIALS),
            IntegrationEntity(id=2, company_id=3, type="n8n", json_content="{}"),
        ])
        self.source = FakeContactSource()
        self.credentials_seen = []

    def _factory(self, credentials):
        self.credentials_seen.append(credentials)
        return self.source


class TestIntegrationContactHandlerTests(_HandlerTestCase):
    def setUp(self):
        super().setUp()
        self.handler = TestIntegrationContactHandler(
            self.integrations,
            ContactReconciler(self.contacts, now=lambda: NOW),
            self._factory,
        )

    def _probe(self, number="(11) 98765-4321", integration_id=1):
        return self.handler.handle(
            TestIntegrationContactCommand(integration_id=integration_id, company_id=3, test_number=number)
        )

    # ----------------------------------------------------------------─  busca filtrada
    def test_filtered_match_creates_contact(self):
        self.source.filtered = [make_record("77", "JOANA PRADO", celular="11 98765-4321", birth="1988-01-20")]

        result = self._probe()

        self.assertTrue(result.created)
        self.assertTrue(result.updated)
        self.assertEqual(result.message, "Contato criado com sucesso.")
        self.assertEqual(result.external_id, "77")
        self.assertEqual(self.source.filter_calls, ["11987654321"])
        self.assertEqual(self.source.requested_pages, [])
        self.assertEqual(self.contacts.find_by_phone(3, "5511987654321").name, "Joana Prado")
        self.assertEqual(self.credentials_seen[0].base_url, "https://crm.local/api")

    def test_prefers_match_with_birth_date(self):
        self.source.filtered = [
            make_record("1", celular="11 98765-4321", birth=""),
            make_record("2", celular="11 98765-4321", birth="1990-02-02"),
        ]

        result = self._probe()

        self.assertEqual(result.external_id, "2")
        self.assertTrue(result.created)

    def test_matches_by_secondary_phone(self):
        self.source.filtered = [
            make_record("9", celular="11 90000-0000", telefone="(11) 98765-4321", birth="1990-02-02"),
        ]

        result = self._probe()

        self.assertEqual(result.external_id, "9")
        self.assertIsNotNone(self.contacts.find_by_phone(3, "5511987654321"))

    def test_existing_contact_updated(self):
        self.contacts.add(make_contact(4, company_id=3, number="5511987654321", name="Joana", birth_date=date(1988, 1, 19)))
        self.source.filtered = [make_record("77", celular="11987654321", birth="1988-01-20")]

        result = self._probe()

        self.assertEqual((result.updated, result.created), (True, False))
        self.assertEqual(result.message, "Contato atualizado com sucesso.")
        self.assertEqual(result.contact_id, 4)

    def test_existing_contact_unchanged(self):
        self.contacts.add(make_contact(4, company_id=3, number="5511987654321", name="Joana", birth_date=date(1988, 1, 20)))
        self.source.filtered = [make_record("77", celular="11987654321", birth="1988-01-20")]

        result = self._probe()

        self.assertFalse(result.updated)
        self.assertEqual(result.message, "Nenhuma atualização necessária.")

    def test_unknown_contact_without_birth_date(self):
        self.source.filtered = [make_record("77", celular="11987654321", birth="0000-00-00")]

        result = self._probe()

        self.assertFalse(result.created)
        self.assertEqual(result.message, "Contato não encontrado e data de nascimento inválida.")
        self.assertEqual(self.contacts.created, [])

    # ----------------------------------------------------------------─  varredura
    def test_non_matching_filter_falls_back_to_page_walk(self):
        self.source.filtered = [make_record("1", celular="11 91234-0000")]
        self.source.pages = [
            [make_record("2", celular="11 95555-5555")],
            [make_record("3", celular="11 98765-4321", birth="1990-02-02")],
        ]
        self.source.total_pages = 2

        result = self._probe()

        self.assertEqual(result.external_id, "3")
        self.assertEqual(self.source.requested_pages, [1, 2])

    def test_page_walk_is_bounded(self):
        self.source.total_pages = 40

        result = self._probe()

        self.assertEqual(result.message, "Cliente não encontrado na Gestao Click.")
        self.assertEqual(self.source.requested_pages, [1, 2, 3, 4, 5])

    # ----------------------------------------------------------------─  rejeições
    def test_invalid_number(self):
        result = self._probe("123")

        self.assertEqual(result.message, "Número de teste inválido.")
        self.assertEqual(self.source.filter_calls, [])

    def test_unknown_integration(self):
        self.assertEqual(self._probe(integration_id=99).message, "Integração não encontrada.")

    def test_wrong_integration_type(self):
        self.assertEqual(self._probe(integration_id=2).message, "Integração não é do tipo Gestao Click.")

    def test_api_errors_become_messages(self):
        def broken(_phone):
            raise UnauthorizedError("HTTP 401", status_code=401)

        self.source.list_by_phone_filter = broken

        result = self._probe()

        self.assertEqual(result.message, "Tokens inválidos ou sem permissão.")
        self.assertFalse(result.created)


class PingIntegrationHandlerTests(_HandlerTestCase):
    def _ping(self, integration_id=1):
        handler = PingIntegrationHandler(self.integrations, self._factory)
        return handler.handle(PingIntegrationCommand(integration_id=integration_id, company_id=3))

    def test_ok(self):
        result = self._ping()

        self.assertTrue(result.ok)
        self.assertEqual(self.source.pings, 1)

    def test_failure_reasons(self):
        cases = [
            (UnauthorizedError("x", status_code=403), "Tokens inválidos ou sem permissão."),
            (RateLimitedError("x", status_code=429), "Limite de requisições atingido."),
            (UnreachableError("x"), "Falha ao conectar na API."),
        ]
        for error, message in cases:
            with self.subTest(error=type(error).__name__):
                self.source.ping_error = error
                result = self._ping()
                self.assertFalse(result.ok)
                self.assertEqual(result.message, message)

    def test_missing_tokens(self):
        self.integrations.integrations[1].json_content = None

        result = self._ping()

        self.assertEqual(result.message, "Tokens da Gestao Click não configurados.")
        self.assertEqual(self.source.pings, 0)


class SyncIntegrationHandlerTests(_HandlerTestCase):
    def _sync(self, integration_id=1):
        service = ReconciliationService(
            self.integrations,
            ContactReconciler(self.contacts, now=lambda: NOW),
            self._factory,
            EventDispatcher(),
            page_delay_seconds=0,
        )
        handler = SyncIntegrationHandler(self.integrations, service)
        return handler.handle(SyncIntegrationCommand(integration_id=integration_id, company_id=3))

    def test_success_message_counts_touched_contacts(self):
        self.source.pages = [[
            make_record("1", celular="11 91111-1111"),
            make_record("2", celular="11 92222-2222"),
        ]]
        self.source.total_pages = 1

        result = self._sync()

        self.assertTrue(result.ok)
        self.assertEqual(result.updated_count, 2)
        self.assertEqual(result.message, "Sincronização concluída. Contatos atualizados: 2")

    def test_failure_message(self):
        self.source.total_pages = 1
        self.source.errors = {1: ExternalApiError("HTTP 400 em /clientes", status_code=400)}

        result = self._sync()

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Sincronização falhou: HTTP 400 em /clientes")

    def test_wrong_type_is_rejected(self):
        result = self._sync(integration_id=2)

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Integração não é do tipo Gestao Click.")
        self.assertEqual(self.integrations.ledgers, [])


class DescribeApiErrorTests(TestCase):
    def test_unclassified_error_keeps_message(self):
        self.assertEqual(describe_api_error(ExternalApiError("HTTP 418")), "HTTP 418")
        self.assertEqual(describe_api_error(ValueError("boom")), "Erro inesperado: boom")
