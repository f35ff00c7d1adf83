from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.contact_entity import ExternalPage


class ExternalContactSource(ABC):
    """
    Acesso somente-leitura à lista de clientes do CRM externo.

    Não há retry implícito: falhas saem classificadas como
    `UnauthorizedError`, `RateLimitedError` ou `UnreachableError`.
    """

    @abstractmethod
    def list_page(self, page: int) -> ExternalPage:
        ...

    @abstractmethod
    def list_by_phone_filter(self, phone_digits: str) -> ExternalPage:
        ...

    @abstractmethod
    def ping(self) -> None:
        """Chamada leve usada para validar credenciais."""
        ...
