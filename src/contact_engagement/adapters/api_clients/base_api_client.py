from __future__ import annotations

from http import HTTPStatus
from typing import Any, TypeVar
from urllib.parse import urljoin

import requests
import structlog
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from contact_engagement.core.domain.events.exceptions import (
    ExternalApiError,
    RateLimitedError,
    UnauthorizedError,
    UnreachableError,
)

T = TypeVar("T", bound=BaseModel)


def classify_http_error(status_code: int, message: str) -> ExternalApiError:
    """Converte um status HTTP de erro na exceção de domínio correspondente."""
    if status_code in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
        return UnauthorizedError(message, status_code=status_code)
    if status_code == HTTPStatus.TOO_MANY_REQUESTS:
        return RateLimitedError(message, status_code=status_code)
    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        return UnreachableError(message, status_code=status_code)
    return ExternalApiError(message, status_code=status_code)


class BaseAPIClient:
    """
    Utilitário HTTP simples (GET) com:
      • timeout configurável
      • erros traduzidos para exceções de domínio
      • parse + validação Pydantic

    Não há retry na sessão; quem chama decide se e como repetir.
    """

    def __init__(
        self,
        *,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.log = structlog.get_logger(__name__).bind(component=self.__class__.__name__)
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout

        self.log.debug("client.configured", base_url=self.base_url, timeout=timeout)

        # sessão sem retry -------------------------------------------------------------
        self.session = requests.Session()
        if default_headers:
            self.session.headers.update(default_headers)

        adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
        for scheme in ("https://", "http://"):
            self.session.mount(scheme, adapter)

    # ---------------------------------------------------------------------- utils -----
    @staticmethod
    def _sanitize_payload(payload: Any) -> Any:
        """Troca None por "" nos campos dos registros de `data`."""
        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            for rec in payload["data"]:
                if not isinstance(rec, dict):
                    continue
                for k, v in rec.items():
                    if v is None:
                        rec[k] = ""
        return payload

    # ---------------------------------------------------------------------- HTTP GET --
    def _get(self, path: str, *, params: dict[str, Any], response_model: type[T]) -> T:
        url = urljoin(self.base_url, path.lstrip("/"))
        log = self.log.bind(method="GET", url=url, params=params, model=response_model.__name__)
        log.debug("http.request")

        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as exc:
            log.warning("http.unreachable", error=str(exc))
            raise UnreachableError(f"Falha ao conectar em {url}: {exc}") from exc
        except requests.RequestException as exc:
            log.error("http.request_failed", error=str(exc), exc_info=True)
            raise ExternalApiError(f"Falha na requisição para {url}: {exc}") from exc

        log.debug("http.response", status_code=resp.status_code)
        if resp.status_code >= HTTPStatus.BAD_REQUEST:
            error = classify_http_error(resp.status_code, f"HTTP {resp.status_code} em {url}")
            log.warning("http.error_status", status_code=resp.status_code, error_type=error.__class__.__name__)
            raise error

        try:
            payload = self._sanitize_payload(resp.json())
            return response_model.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            log.error("http.invalid_payload", error=str(exc), exc_info=True)
            raise ExternalApiError(f"Resposta inválida de {url}: {exc}") from exc
