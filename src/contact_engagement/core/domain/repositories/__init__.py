from .channel_repository import ChannelRepository
from .company_repository import CompanyRepository
from .contact_repository import ContactRepository
from .integration_repository import IntegrationRepository
from .user_repository import UserRepository

__all__ = [
    "ChannelRepository",
    "CompanyRepository",
    "ContactRepository",
    "IntegrationRepository",
    "UserRepository",
]
