from abc import ABC, abstractmethod
from typing import Any


class RealtimeNotifier(ABC):
    @abstractmethod
    def publish_tenant_event(self, company_id: int, event_name: str, payload: dict[str, Any]) -> None:
        """Publica um evento para os clientes conectados da empresa (fire-and-forget)."""
        ...
