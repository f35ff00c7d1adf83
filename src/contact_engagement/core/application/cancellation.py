from __future__ import annotations

import threading


class CancellationToken:
    """
    Sinal cooperativo de cancelamento.

    `sleep()` é o único ponto de espera do motor: retorna assim que o token
    é cancelado, em vez de esperar o intervalo inteiro.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def sleep(self, seconds: float) -> bool:
        """Dorme até `seconds`. Retorna True se foi interrompido por cancelamento."""
        if seconds <= 0:
            return self.cancelled
        return self._event.wait(seconds)
