"""Domain models shared across the package."""

from .models import (
    AlertCadenceState,
    AlertFrequency,
    DigestFrequency,
    NotificationPreferenceState,
    UserProfile,
)

__all__ = [
    "AlertFrequency",
    "DigestFrequency",
    "UserProfile",
    "AlertCadenceState",
    "NotificationPreferenceState",
]
