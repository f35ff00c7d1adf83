from abc import ABC, abstractmethod


class DedupStore(ABC):
    """
    Fonte única de verdade para "já enviado hoje".

    `claim` precisa ser atômico (set-if-absent): duas reivindicações
    concorrentes da mesma chave nunca podem retornar True ao mesmo tempo.
    """

    @abstractmethod
    def claim(self, key: str, ttl_seconds: int) -> bool:
        """True se a chave foi criada agora; False se já existia."""
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...
