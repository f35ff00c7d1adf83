"""Reconciliação de contatos e disparo de notificações de aniversário."""

__version__ = "0.1.0"
