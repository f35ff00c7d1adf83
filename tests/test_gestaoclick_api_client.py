import copy
from unittest import TestCase
from unittest.mock import MagicMock

import requests

from contact_engagement.adapters.api_clients.gestaoclick_api_client import GestaoClickAPIClient
from contact_engagement.core.application.dtos.integration_dtos import IntegrationCredentials
from contact_engagement.core.domain.events.exceptions import (
    ExternalApiError,
    InvalidInputError,
    RateLimitedError,
    UnauthorizedError,
    UnreachableError,
)

PAGE_PAYLOAD = {
    "code": 200,
    "status": "success",
    "meta": {"total_registros": 2, "total_paginas": 4, "pagina_atual": 1},
    "data": [
        {
            "id": 101,
            "nome": "MARIA DA SILVA",
            "data_nascimento": "1990-05-12",
            "telefone": "(43) 3322-1100",
            "celular": None,
            "email": None,
            "ativo": "1",
        },
        {"id": "102", "nome": None, "data_nascimento": None, "celular": "11987654321", "ativo": "0"},
    ],
}


def _response(status_code=200, payload=None):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = copy.deepcopy(payload) if payload is not None else {}
    return resp


class GestaoClickAPIClientTests(TestCase):
    def setUp(self):
        credentials = IntegrationCredentials.from_json_content(
            '{"gcAccessToken": " abc ", "gcSecretToken": "xyz", "gcBaseUrl": "https://crm.local/api/"}'
        )
        self.client = GestaoClickAPIClient(credentials, timeout=3)
        self.client.session.get = MagicMock(return_value=_response(payload=PAGE_PAYLOAD))

    def test_headers_carry_tokens(self):
        self.assertEqual(self.client.session.headers["access-token"], "abc")
        self.assertEqual(self.client.session.headers["secret-access-token"], "xyz")

    def test_list_page(self):
        page = self.client.list_page(1)

        self.client.session.get.assert_called_once_with(
            "https://crm.local/api/clientes", params={"pagina": 1}, timeout=3
        )
        self.assertEqual(page.total_pages, 4)
        first, second = page.records
        self.assertEqual(first.external_id, "101")
        self.assertEqual(first.raw_phone_candidates, ("", "(43) 3322-1100"))
        self.assertEqual(first.raw_birth_date, "1990-05-12")
        self.assertEqual(second.raw_name, "")
        self.assertEqual(second.raw_phone_candidates[0], "11987654321")
        self.assertFalse(second.active)

    def test_malformed_records_do_not_drop_the_page(self):
        payload = {
            "code": 200,
            "meta": {"total_paginas": 2},
            "data": [
                {"id": 1, "nome": "ANA", "celular": "11987654321"},
                {"nome": "SEM ID", "celular": "11912345678"},
                "lixo",
                {"id": 3, "nome": "JOSE", "email": {"invalido": True}},
                {"id": 4, "nome": "PEDRO", "celular": "11955554444"},
            ],
        }
        self.client.session.get.return_value = _response(payload=payload)

        page = self.client.list_page(1)

        self.assertEqual(page.total_pages, 2)
        self.assertEqual([r.external_id for r in page.records], ["1", "", "4"])
        self.assertEqual(page.records[1].raw_name, "SEM ID")

    def test_phone_filter(self):
        self.client.list_by_phone_filter("11987654321")

        self.client.session.get.assert_called_once_with(
            "https://crm.local/api/clientes", params={"telefone": "11987654321"}, timeout=3
        )

    def test_empty_envelope(self):
        self.client.session.get.return_value = _response(payload={"code": 200, "data": None, "meta": None})

        page = self.client.list_page(1)

        self.assertEqual(page.records, [])
        self.assertIsNone(page.total_pages)

    def test_ping_hits_stores_endpoint(self):
        self.client.session.get.return_value = _response(payload={"code": 200, "data": [{"id": 1}]})

        self.client.ping()

        self.assertEqual(self.client.session.get.call_args.args[0], "https://crm.local/api/lojas")

    def test_error_classification(self):
        cases = [
            (401, UnauthorizedError),
            (403, UnauthorizedError),
            (429, RateLimitedError),
            (502, UnreachableError),
            (404, ExternalApiError),
        ]
        for status, expected in cases:
            with self.subTest(status=status):
                self.client.session.get.return_value = _response(status_code=status)
                with self.assertRaises(expected) as ctx:
                    self.client.list_page(1)
                self.assertEqual(ctx.exception.status_code, status)

    def test_unclassified_error_is_not_a_known_subclass(self):
        self.client.session.get.return_value = _response(status_code=404)

        with self.assertRaises(ExternalApiError) as ctx:
            self.client.list_page(1)

        self.assertNotIsInstance(ctx.exception, (UnauthorizedError, RateLimitedError, UnreachableError))

    def test_network_failure_is_unreachable(self):
        self.client.session.get.side_effect = requests.ConnectionError("recusado")

        with self.assertRaises(UnreachableError):
            self.client.list_page(1)

    def test_invalid_json(self):
        resp = _response()
        resp.json.side_effect = ValueError("not json")
        self.client.session.get.return_value = resp

        with self.assertRaises(ExternalApiError):
            self.client.list_page(1)


class IntegrationCredentialsTests(TestCase):
    def test_default_base_url(self):
        credentials = IntegrationCredentials.from_json_content('{"gcAccessToken": "a", "gcSecretToken": "b"}')

        self.assertEqual(credentials.base_url, "https://api.beteltecnologia.com/api")

    def test_invalid_blobs(self):
        for blob in [None, "", "not json", "[]", '{"gcAccessToken": "a"}', '{"gcAccessToken": " ", "gcSecretToken": "b"}']:
            with self.subTest(blob=blob), self.assertRaises(InvalidInputError):
                IntegrationCredentials.from_json_content(blob)
