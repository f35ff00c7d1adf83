from collections.abc import Callable

import structlog

from contact_engagement.core.domain.events.events import DomainEvent

logger = structlog.get_logger(__name__)

Listener = Callable[[DomainEvent], None]


def _listener_name(listener: Listener) -> str:
    return getattr(listener, "__qualname__", listener.__class__.__name__)


class EventDispatcher:
    """
    Barramento síncrono dos eventos de reconciliação e de aniversários.

    Um listener inscrito numa classe base recebe também as subclasses
    (`DomainEvent` recebe tudo). Falha de um listener é logada com a
    empresa do evento e não impede os demais; `dispatch` devolve quantos
    falharam.
    """

    def __init__(self) -> None:
        self._listeners: dict[type[DomainEvent], list[Listener]] = {}

    def subscribe(self, event_type: type[DomainEvent], listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)
        logger.debug("event.subscribed", event_type=event_type.__name__, listener=_listener_name(listener))

    def listeners_for(self, event_type: type[DomainEvent]) -> list[Listener]:
        found: list[Listener] = []
        for klass in event_type.__mro__:
            found.extend(self._listeners.get(klass, ()))
        return found

    def dispatch(self, event: DomainEvent) -> int:
        listeners = self.listeners_for(type(event))
        log = logger.bind(
            event_name=type(event).__name__,
            event_id=str(event.event_id),
            company_id=getattr(event, "company_id", None),
        )
        log.debug("event.dispatch", listeners=len(listeners))

        failures = 0
        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:  # noqa: BLE001
                failures += 1
                log.error("event.listener_failed", listener=_listener_name(listener), error=str(exc), exc_info=True)
        return failures
