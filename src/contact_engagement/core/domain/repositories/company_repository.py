from abc import ABC, abstractmethod

from contact_engagement.core.domain.entities.birthday_entity import BirthdaySettings


class CompanyRepository(ABC):
    @abstractmethod
    def list_active_ids(self) -> list[int]:
        """IDs das empresas ativas."""
        ...

    @abstractmethod
    def get_birthday_settings(self, company_id: int) -> BirthdaySettings:
        """Configurações de aniversário; devolve os padrões se não houver registro."""
        ...
