from .announcement_sink import AnnouncementSink
from .dedup_store import DedupStore
from .external_contact_source import ExternalContactSource
from .notification_sender import NotificationSender
from .realtime_notifier import RealtimeNotifier
from .ticketing import Ticketing

__all__ = [
    "AnnouncementSink",
    "DedupStore",
    "ExternalContactSource",
    "NotificationSender",
    "RealtimeNotifier",
    "Ticketing",
]
