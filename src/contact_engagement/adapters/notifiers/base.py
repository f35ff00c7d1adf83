import time
from http import HTTPStatus

import backoff
import httpx
import structlog
from prometheus_client import Counter, Histogram

from contact_engagement.adapters.observability.metrics import registry
from contact_engagement.core.domain.events.exceptions import (
    ChannelUnavailableError,
    RejectedError,
    TransientError,
)

logger = structlog.get_logger()

REQ_LATENCY = Histogram("notifier_request_seconds", "Latency", ["provider", "channel"], registry=registry)
REQ_SUCCESS = Counter("notifier_success_total", "Success", ["provider", "channel"], registry=registry)
REQ_FAILURE = Counter("notifier_failure_total", "Failure", ["provider", "channel"], registry=registry)


class BaseNotifier:
    """
    Base HTTP dos gateways de mensagem.

    Só falhas de conexão são repetidas: a requisição não chegou ao gateway,
    então repetir não duplica a mensagem. Qualquer outra falha sai traduzida
    para `RejectedError`, `ChannelUnavailableError` ou `TransientError`.
    """

    DEFAULT_TIMEOUT = 10

    def __init__(self, provider: str, channel: str, *, timeout: float | None = None) -> None:
        self.provider = provider
        self.channel = channel
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    @backoff.on_exception(backoff.expo, (httpx.ConnectError, httpx.ConnectTimeout), max_tries=3, jitter=None)
    def _send_request(self, method: str, url: str, **kw) -> httpx.Response:
        return httpx.request(method, url, timeout=self.timeout, **kw)

    def _request(self, method: str, url: str, **kw) -> httpx.Response:
        start = time.perf_counter()
        try:
            try:
                resp = self._send_request(method, url, **kw)
            except httpx.HTTPError as exc:
                raise TransientError(f"{self.provider}: falha de rede ({exc.__class__.__name__})") from exc
            self._raise_for_status(resp)
            REQ_SUCCESS.labels(self.provider, self.channel).inc()
            return resp
        except Exception:
            REQ_FAILURE.labels(self.provider, self.channel).inc()
            raise
        finally:
            REQ_LATENCY.labels(self.provider, self.channel).observe(time.perf_counter() - start)

    def _raise_for_status(self, resp: httpx.Response) -> None:
        status = resp.status_code
        if status < HTTPStatus.BAD_REQUEST:
            return
        detail = f"{self.provider}: HTTP {status}"
        if status == HTTPStatus.CONFLICT:
            raise ChannelUnavailableError(detail)
        if status >= HTTPStatus.INTERNAL_SERVER_ERROR or status == HTTPStatus.TOO_MANY_REQUESTS:
            raise TransientError(detail)
        raise RejectedError(detail)
