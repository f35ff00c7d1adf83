from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date

from contact_engagement.core.domain.entities.contact_entity import ContactEntity


class ContactRepository(ABC):
    @abstractmethod
    def find_by_phone(self, company_id: int, number: str) -> ContactEntity | None:
        """Busca um contato da empresa pelo telefone canônico."""
        ...

    @abstractmethod
    def find_by_id(self, company_id: int, contact_id: int) -> ContactEntity | None:
        """Retorna um contato pelo ID, restrito à empresa."""
        ...

    @abstractmethod
    def create(
        self,
        *,
        company_id: int,
        number: str,
        name: str,
        birth_date: date | None,
    ) -> ContactEntity:
        """Cria um contato. Cada chamada é uma transação própria."""
        ...

    @abstractmethod
    def update(self, contact_id: int, fields: dict) -> None:
        """Atualiza apenas os campos informados (`name`, `birth_date`)."""
        ...

    @abstractmethod
    def list_active_with_birth_date(self, company_id: int) -> Iterable[ContactEntity]:
        """
        Contatos ativos com data de nascimento preenchida.
        Implementações devem paginar internamente e devolver um iterável.
        """
        ...

    @abstractmethod
    def list_after(self, cursor: int, limit: int) -> list[ContactEntity]:
        """
        Próximo lote de contatos (não-grupo) com `id > cursor`, ordenado por id.
        O cursor pertence a quem chama; o repositório não guarda estado.
        """
        ...
