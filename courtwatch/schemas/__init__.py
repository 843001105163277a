"""API schemas."""
from courtwatch.schemas.base import CamelModel
from courtwatch.schemas.availability import (
    AvailabilityResponse,
    SlotOut,
    VenueSummary,
)
from courtwatch.schemas.user import (
    AdminUserCreate,
    AdminUserOut,
    AdminUserUpdate,
    UserMeResponse,
    UserOut,
)
from courtwatch.schemas.preferences import (
    NotificationPreferenceOut,
    NotificationPreferenceUpdate,
)
from courtwatch.schemas.watch import ActiveToggle, WatchCreate, WatchOut, WatchUpdate
from courtwatch.schemas.channel import ChannelCreate, ChannelOut, ChannelUpdate
from courtwatch.schemas.registration import (
    RegistrationCreate,
    RegistrationRequestOut,
    RegistrationSubmitted,
    ReviewAction,
)
from courtwatch.schemas.scraping import CleanupRequest, ScrapingLogOut

__all__ = [
    "CamelModel",
    "AvailabilityResponse",
    "SlotOut",
    "VenueSummary",
    "AdminUserCreate",
    "AdminUserOut",
    "AdminUserUpdate",
    "UserMeResponse",
    "UserOut",
    "NotificationPreferenceOut",
    "NotificationPreferenceUpdate",
    "ActiveToggle",
    "WatchCreate",
    "WatchOut",
    "WatchUpdate",
    "ChannelCreate",
    "ChannelOut",
    "ChannelUpdate",
    "RegistrationCreate",
    "RegistrationRequestOut",
    "RegistrationSubmitted",
    "ReviewAction",
    "CleanupRequest",
    "ScrapingLogOut",
]
