"""Notifier interface and exceptions.

Delivery (email rendering, SMTP, SMS) lives outside this package. The
dispatch cycle only talks to a ``Notifier`` and hands it plain payload dicts
built by ``resume_matcher.matching.utils.build_notification_payload`` and
``resume_matcher.notifications.payloads.build_digest_payload``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class NotifierError(Exception):
    """Raised by a notifier when delivery fails.

    The dispatch cycle treats it like a False return: the alert is not marked
    sent and is retried on the next cycle.
    """

    pass


class Notifier(ABC):
    """Delivers match notifications and digests to users."""

    @abstractmethod
    def send_match(self, payload: Dict[str, Any]) -> bool:
        """Deliver one match notification.

        Args:
            payload: Dict with recipient_email, recipient_name, job_title,
                company, score, matched_skills, missing_skills and url

        Returns:
            True if the notification was handed off successfully
        """

    @abstractmethod
    def send_digest(self, payload: Dict[str, Any]) -> bool:
        """Deliver one digest.

        Args:
            payload: Dict with recipient_email, recipient_name, match_count
                and a list of match entries

        Returns:
            True if the digest was handed off successfully
        """
