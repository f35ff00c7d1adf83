class EngagementError(Exception):
    """Classe base para todas as exceções do motor."""
    pass

class InvalidInputError(EngagementError):
    """Telefone, data, nome ou configuração malformados. Sempre recuperável."""
    pass

class NotFoundError(EngagementError):
    """Integração, empresa ou contato inexistente."""
    pass

# ─────────────────────────────── API externa (CRM)
class ExternalApiError(EngagementError):
    """
    Falha ao consultar a API externa. Instâncias desta classe base (sem
    subclasse) não foram classificadas e abortam a execução corrente.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

class UnauthorizedError(ExternalApiError):
    """401/403: tokens inválidos ou sem permissão."""
    pass

class RateLimitedError(ExternalApiError):
    """429: limite de requisições atingido."""
    pass

class UnreachableError(ExternalApiError):
    """Rede, timeout ou 5xx."""
    pass

# ─────────────────────────────── envio
class DuplicateSendError(EngagementError):
    """A chave de deduplicação do dia já foi reivindicada."""
    pass

class NotificationError(EngagementError):
    """Classe base para falhas do transporte de mensagens."""
    pass

class ChannelUnavailableError(NotificationError):
    """Nenhuma conexão utilizável (ausente ou desconectada)."""
    pass

class RejectedError(NotificationError):
    """
    Erro permanente que não deve ser retentado.
    Exemplos: 4xx do gateway, número inexistente, API key inválida.
    """
    pass

class TransientError(NotificationError):
    """Erro temporário: 5xx, falha de rede, timeout."""
    pass

# ─────────────────────────────── execução
class RunCancelledError(EngagementError):
    """Cancelamento cooperativo recebido entre páginas ou destinatários."""
    pass
