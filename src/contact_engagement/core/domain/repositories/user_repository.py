from abc import ABC, abstractmethod
from collections.abc import Iterable

from contact_engagement.core.domain.entities.user_entity import UserEntity


class UserRepository(ABC):
    @abstractmethod
    def list_with_birth_date(self, company_id: int) -> Iterable[UserEntity]:
        """Usuários da empresa com data de nascimento preenchida."""
        ...

    @abstractmethod
    def find_by_id(self, user_id: int) -> UserEntity | None:
        ...
