from dataclasses import asdict
from typing import Any, TypeVar

T = TypeVar("T")


class EntityMixin:
    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        """
        Cria uma instância da entidade a partir de um dict.
        """
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """
        Converte a entidade em dict, recursivamente se for dataclass.
        """
        return asdict(self)
