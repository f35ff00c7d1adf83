from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

import structlog

# ───────────────────────────────────────────────
# CQRS enxuto com log de performance
# ───────────────────────────────────────────────

C = TypeVar('C')  # Command type
Q = TypeVar('Q')  # Query type
R = TypeVar('R')  # Result type

logger = structlog.get_logger(__name__)

# ───────────────────────────────────────────────
# DTOs
# ───────────────────────────────────────────────
@dataclass(frozen=True)
class CommandDTO:
    """Base para todos os comandos (operações com efeito colateral)."""
    pass

@dataclass(frozen=True)
class QueryDTO:
    """Base para consultas de leitura."""
    pass

# ───────────────────────────────────────────────
# Handlers Protocols
# ───────────────────────────────────────────────
class CommandHandler(Protocol, Generic[C]):
    def handle(self, command: C) -> Any:
        """Processa um comando e aplica mudanças de estado."""
        ...

class QueryHandler(Protocol, Generic[Q, R]):
    def handle(self, query: Q) -> R:
        """Processa uma consulta e retorna um resultado."""
        ...

# ───────────────────────────────────────────────
# Buses com Logging
# ───────────────────────────────────────────────
class _Bus:
    kind = "handler"

    def __init__(self) -> None:
        self._handlers: dict[type, Any] = {}

    def register(self, message_type: type, handler: Any) -> None:
        self._handlers[message_type] = handler
        logger.debug("bus.registered", kind=self.kind, message=message_type.__name__)

    def dispatch(self, message: Any) -> Any:
        handler = self._handlers.get(type(message))
        if not handler:
            raise ValueError(f"Nenhum handler para {self.kind}: {type(message).__name__}")
        start = time.perf_counter()
        logger.info("bus.dispatch", kind=self.kind, message=type(message).__name__)
        result = handler.handle(message)
        elapsed = time.perf_counter() - start
        logger.info(
            "bus.done",
            kind=self.kind,
            message=type(message).__name__,
            duration=f"{elapsed:.3f}s",
        )
        return result

class CommandBus(_Bus):
    """Dispatcher de comandos com medição de performance."""
    kind = "command"

class QueryBus(_Bus):
    """Dispatcher de queries com medição de performance."""
    kind = "query"

# ───────────────────────────────────────────────
# Service de Alto Nível
# ───────────────────────────────────────────────
class BaseService:
    """Orquestra execução de comandos e queries via buses."""
    def __init__(self, command_bus: CommandBus, query_bus: QueryBus) -> None:
        self.commands = command_bus
        self.queries = query_bus

    def execute(self, command: CommandDTO) -> Any:
        return self.commands.dispatch(command)

    def query(self, query: QueryDTO) -> Any:
        return self.queries.dispatch(query)
