from __future__ import annotations

import structlog

from contact_engagement.adapters.api_clients.base_api_client import BaseAPIClient
from contact_engagement.core.application.dtos.gestaoclick_dtos import (
    GestaoClickLojasResponseDTO,
    GestaoClickResponseDTO,
)
from contact_engagement.core.application.dtos.integration_dtos import IntegrationCredentials
from contact_engagement.core.domain.entities.contact_entity import ExternalPage
from contact_engagement.core.domain.ports.external_contact_source import ExternalContactSource

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class GestaoClickAPIClient(BaseAPIClient, ExternalContactSource):
    """
    Cliente somente-leitura da API GestaoClick (clientes e lojas).
    Uma instância por integração: os tokens vão em todas as requisições.
    """

    # ---------------------------------------------------------------- init ----------
    def __init__(self, credentials: IntegrationCredentials, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        super().__init__(
            base_url=credentials.base_url,
            default_headers={
                "Accept": "application/json",
                "access-token": credentials.access_token,
                "secret-access-token": credentials.secret_token,
            },
            timeout=timeout,
        )

    # ---------------------------------------------------------------- clientes ------
    def list_page(self, page: int) -> ExternalPage:
        raw = self._get("/clientes", params={"pagina": page}, response_model=GestaoClickResponseDTO)
        result = raw.to_page()
        logger.debug("gestaoclick.page", page=page, total_pages=result.total_pages, records=len(result.records))
        return result

    def list_by_phone_filter(self, phone_digits: str) -> ExternalPage:
        raw = self._get("/clientes", params={"telefone": phone_digits}, response_model=GestaoClickResponseDTO)
        return raw.to_page()

    # ---------------------------------------------------------------- lojas ---------
    def ping(self) -> None:
        self._get("/lojas", params={}, response_model=GestaoClickLojasResponseDTO)


def build_gestaoclick_client(credentials: IntegrationCredentials, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> GestaoClickAPIClient:
    return GestaoClickAPIClient(credentials, timeout=timeout)
