import json
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any
from uuid import UUID

import backoff
import pika
import pika.exceptions
import structlog
from pika.adapters.blocking_connection import BlockingChannel

from contact_engagement.core.domain.ports.realtime_notifier import RealtimeNotifier

logger = structlog.get_logger()

REALTIME_EXCHANGE = "engagement.realtime"


def _json_default(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    raise TypeError(f"Tipo não serializável: {type(value).__name__}")


def _drop_connection(details: dict) -> None:
    rabbit = details["args"][0]
    logger.warning("rabbitmq.reconnecting", tries=details["tries"], error=str(details.get("exception")))
    rabbit.close()


_reconnect_once = backoff.on_exception(
    backoff.constant,
    pika.exceptions.AMQPConnectionError,
    max_tries=2,
    interval=0,
    jitter=None,
    on_backoff=_drop_connection,
)


class RabbitMQ:
    """
    Conexão bloqueante única, reaberta sob demanda. Cada uso drena os
    eventos pendentes (heartbeats) antes de abrir o canal; canais são por
    operação e sempre fechados.
    """

    def __init__(self, url: str):
        self._params = pika.URLParameters(url)
        self._conn = None

    def connect(self):
        if self._conn is not None and self._conn.is_open:
            try:
                self._conn.process_data_events(time_limit=0)
            except pika.exceptions.AMQPConnectionError as exc:
                logger.warning("rabbitmq.stale_connection", error=str(exc))
                self._conn = None
        if self._conn is None or self._conn.is_closed:
            self._conn = pika.BlockingConnection(self._params)
        return self._conn

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None or not conn.is_open:
            return
        try:
            conn.close()
        except pika.exceptions.AMQPError as exc:
            logger.debug("rabbitmq.close_failed", error=str(exc))

    @contextmanager
    def channel(self) -> Iterator[BlockingChannel]:
        ch = self.connect().channel()
        try:
            yield ch
        finally:
            if ch.is_open:
                ch.close()

    @_reconnect_once
    def declare_exchange(self, name: str, exchange_type: str = "topic"):
        with self.channel() as ch:
            ch.exchange_declare(exchange=name, exchange_type=exchange_type, durable=True)

    @_reconnect_once
    def publish(self, exchange: str, routing_key: str, message: dict):
        with self.channel() as ch:
            ch.basic_publish(
                exchange=exchange,
                routing_key=routing_key,
                body=json.dumps(message, default=_json_default).encode(),
                properties=pika.BasicProperties(delivery_mode=2, content_type="application/json"),
            )
        logger.info("rabbitmq.published", exchange=exchange, routing_key=routing_key)


class RabbitRealtimeNotifier(RealtimeNotifier):
    """
    Publica eventos de tela por empresa. A ponte WebSocket consome o
    exchange e repassa para a sala `company-{id}`.
    """

    def __init__(self, rabbit: RabbitMQ, exchange: str = REALTIME_EXCHANGE):
        self.rabbit = rabbit
        self.exchange = exchange
        self._declared = False

    def publish_tenant_event(self, company_id: int, event_name: str, payload: dict[str, Any]) -> None:
        if not self._declared:
            self.rabbit.declare_exchange(self.exchange)
            self._declared = True
        self.rabbit.publish(
            self.exchange,
            f"company.{company_id}.{event_name}",
            {"company_id": company_id, "event": f"company-{company_id}-{event_name}", "payload": payload},
        )
