"""Database models."""
from courtwatch.models.user import User
from courtwatch.models.notification_preference import NotificationPreference
from courtwatch.models.venue import Venue
from courtwatch.models.slot import Slot
from courtwatch.models.scraping_log import ScrapingLog
from courtwatch.models.registration_request import RegistrationRequest
from courtwatch.models.watch import Watch
from courtwatch.models.notification_channel import NotificationChannel
from courtwatch.models.notification_log import NotificationLogEntry

__all__ = [
    "User",
    "NotificationPreference",
    "Venue",
    "Slot",
    "ScrapingLog",
    "RegistrationRequest",
    "Watch",
    "NotificationChannel",
    "NotificationLogEntry",
]
