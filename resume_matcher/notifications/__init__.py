"""Notifier interface and payload helpers.

This module provides:
- Notifier: Abstract delivery interface implemented outside this package
- LoggingNotifier: Dry-run notifier that logs payloads
- NotifierError: Raised by notifiers on delivery failure
- build_digest_payload: Batches matched alerts into one digest payload
- get_notifier: Builds the configured notifier (LoggingNotifier for dry runs)
"""

from .base import Notifier, NotifierError
from .factory import get_notifier
from .logging_notifier import LoggingNotifier
from .payloads import build_digest_entry, build_digest_payload

__all__ = [
    "Notifier",
    "NotifierError",
    "LoggingNotifier",
    "get_notifier",
    "build_digest_entry",
    "build_digest_payload",
]
