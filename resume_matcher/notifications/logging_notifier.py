"""Notifier that writes payloads to the log instead of delivering them."""

import logging
from typing import Any, Dict, List, Optional

from resume_matcher.logging import get_logger

from .base import Notifier

logger = get_logger(__name__, component="notification")


class LoggingNotifier(Notifier):
    """Dry-run notifier.

    Every payload is logged at INFO and kept in ``sent_matches`` /
    ``sent_digests`` so a manual run can be inspected afterwards.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger
        self.sent_matches: List[Dict[str, Any]] = []
        self.sent_digests: List[Dict[str, Any]] = []

    def send_match(self, payload: Dict[str, Any]) -> bool:
        self.logger.info(
            f"[dry-run] Match notification for {payload.get('recipient_email')}: "
            f"{payload.get('job_title')} at {payload.get('company')} "
            f"({payload.get('score')})",
            extra={
                "event": "notification.match.logged",
                "alert_id": payload.get("alert_id"),
                "score": payload.get("score"),
                "matched_skills": payload.get("matched_skills"),
                "missing_skills": payload.get("missing_skills"),
            },
        )
        self.sent_matches.append(payload)
        return True

    def send_digest(self, payload: Dict[str, Any]) -> bool:
        self.logger.info(
            f"[dry-run] Digest for {payload.get('recipient_email')}: "
            f"{payload.get('match_count')} matches",
            extra={
                "event": "notification.digest.logged",
                "user_id": payload.get("user_id"),
                "match_count": payload.get("match_count"),
            },
        )
        self.sent_digests.append(payload)
        return True
