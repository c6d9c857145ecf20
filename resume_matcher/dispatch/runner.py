"""Dispatch cycle: the periodic driver around the matching core."""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import uuid4

from resume_matcher.alerts import mark_sent, should_process
from resume_matcher.config.models import AppConfig
from resume_matcher.domain.models import AlertCadenceState, NotificationPreferenceState
from resume_matcher.logging import get_logger
from resume_matcher.logging.context import log_context
from resume_matcher.matching import MatchingEngine, MatchResult
from resume_matcher.matching.utils import build_notification_payload, build_rationale_dict
from resume_matcher.notifications import Notifier, NotifierError, build_digest_payload
from resume_matcher.persistence.database import get_session
from resume_matcher.persistence.repositories import (
    AlertRepository,
    PreferenceRepository,
    UserRepository,
)
from resume_matcher.preferences import (
    default_preferences,
    is_digest_due,
    mark_digest_sent,
    should_notify,
    should_notify_match,
)
from resume_matcher.utils.timestamps import utc_now

from .models import AlertOutcome, DispatchRunResult

logger = get_logger(__name__, component="dispatch")

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


class DispatchCycle:
    """
    Runs one pass over every active alert and every digest subscriber.

    For each due alert: score it, apply the owner's preferences, hand the
    payload to the notifier and, only after the notifier accepted it, advance
    the alert's ``last_sent_at``. A crash between send and mark therefore
    repeats the notification on the next cycle instead of losing it.
    """

    def __init__(
        self,
        engine: MatchingEngine,
        notifier: Notifier,
        app_config: Optional[AppConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Initialize the dispatch cycle.

        Args:
            engine: Matching engine bound to the process-wide skill registry
            notifier: Delivery backend for matches and digests
            app_config: Application configuration (defaults when None)
            clock: Returns the cycle's "now"; utc_now when None
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.engine = engine
        self.notifier = notifier
        self.app_config = app_config or AppConfig()
        self.clock = clock or utc_now
        self.logger = logger_instance or logger
        self._lock = threading.Lock()

    def run_once(self) -> DispatchRunResult:
        """
        Execute a complete dispatch cycle.

        This method:
        1. Acquires a lock to prevent overlapping runs
        2. Loads active alerts and keeps the ones that are due
        3. Processes each due alert in its own transaction
        4. Sends due digests when enabled
        5. Returns aggregate results

        Returns:
            DispatchRunResult with counts and per-alert outcomes

        Raises:
            No exceptions are raised for alert or digest failures; they are
            captured in the result.
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                self.logger.warning(
                    "Dispatch run skipped: previous run still in progress",
                    extra={"event": "dispatch.run.skipped", "reason": "lock_held"},
                )
            return DispatchRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id):
                now = self.clock()
                self.logger.info(
                    "Dispatch run started",
                    extra={"event": "dispatch.run.started", "cycle_time": now.isoformat()},
                )

                try:
                    with get_session() as session:
                        active = AlertRepository(session).get_active()
                except Exception as e:
                    self.logger.error(
                        f"Failed to load active alerts: {e}",
                        extra={"event": "dispatch.run.failed", "error_type": type(e).__name__},
                        exc_info=True,
                    )
                    return DispatchRunResult(
                        run_started_at=run_started_at,
                        run_finished_at=utc_now(),
                        total_errors=1,
                        had_errors=True,
                    )

                due = self._select_due(active, now)
                self._mark_evaluated(due, now)
                outcomes = [self._process_alert(alert, now) for alert in due]

                digests_sent = 0
                digest_errors = 0
                if self.app_config.dispatch.send_digests:
                    digests_sent, digest_errors = self._send_digests(now)

                alert_errors = sum(1 for o in outcomes if o.status in ("error", "send_failed"))
                result = DispatchRunResult(
                    run_started_at=run_started_at,
                    run_finished_at=utc_now(),
                    active_alerts=len(active),
                    due_alerts=len(due),
                    matched_alerts=sum(
                        1 for o in outcomes if o.status in ("sent", "suppressed", "send_failed")
                    ),
                    notifications_sent=sum(1 for o in outcomes if o.sent),
                    digests_sent=digests_sent,
                    total_errors=alert_errors + digest_errors,
                    outcomes=outcomes,
                    had_errors=bool(alert_errors or digest_errors),
                )

                self.logger.info(
                    "Dispatch run completed",
                    extra={
                        "event": "dispatch.run.completed",
                        "duration_ms": int(result.total_duration_seconds * 1000),
                        "active_alerts": result.active_alerts,
                        "due_alerts": result.due_alerts,
                        "matched_alerts": result.matched_alerts,
                        "notifications_sent": result.notifications_sent,
                        "digests_sent": result.digests_sent,
                        "total_errors": result.total_errors,
                    },
                )
                return result

        finally:
            self._lock.release()

    def _select_due(
        self, active: Sequence[AlertCadenceState], now: datetime
    ) -> List[AlertCadenceState]:
        """Keep the due alerts, least recently evaluated first, up to the cap."""
        due = sorted(
            (alert for alert in active if should_process(alert, now)),
            key=lambda alert: (alert.last_evaluated_at or _NEVER, alert.alert_id),
        )

        limit = self.app_config.dispatch.max_alerts_per_cycle
        if limit and len(due) > limit:
            self.logger.info(
                f"Capping due alerts at {limit} of {len(due)}",
                extra={"event": "dispatch.alerts.capped", "due": len(due), "limit": limit},
            )
            due = due[:limit]

        self.logger.info(
            f"{len(due)} of {len(active)} active alerts are due",
            extra={"event": "dispatch.alerts.selected", "due": len(due), "active": len(active)},
        )
        return due

    def _mark_evaluated(self, due: Sequence[AlertCadenceState], now: datetime) -> None:
        """Stamp the selected alerts so the cap rotates through the backlog."""
        if not due:
            return
        try:
            with get_session() as session:
                AlertRepository(session).mark_evaluated([a.alert_id for a in due], now)
        except Exception as e:
            self.logger.warning(
                f"Failed to stamp evaluated alerts: {e}",
                extra={"event": "dispatch.alerts.stamp_failed", "error_type": type(e).__name__},
            )

    def _process_alert(self, alert: AlertCadenceState, now: datetime) -> AlertOutcome:
        """Score, filter, notify and mark one due alert in its own transaction."""
        with log_context(alert_id=alert.alert_id, user_id=alert.user_id):
            try:
                with get_session() as session:
                    profile = UserRepository(session).get(alert.user_id)
                    if profile is None:
                        self.logger.warning(
                            f"Alert {alert.alert_id} has no user profile",
                            extra={"event": "dispatch.alert.orphaned"},
                        )
                        return AlertOutcome(
                            alert.alert_id, alert.user_id, "error", reason="user_not_found"
                        )

                    pref = PreferenceRepository(session).get(alert.user_id)
                    if pref is None:
                        pref = default_preferences(alert.user_id, now)

                    result = self.engine.match_alert(profile, alert)
                    self.logger.debug(
                        "Alert scored",
                        extra={"event": "dispatch.alert.scored", **build_rationale_dict(result)},
                    )

                    if not result.matched:
                        return AlertOutcome(
                            alert.alert_id, alert.user_id, "not_matched", score=result.score
                        )

                    reason = suppression_reason(alert, pref, result)
                    if reason is not None:
                        self.logger.info(
                            f"Notification suppressed for alert {alert.alert_id}: {reason}",
                            extra={"event": "dispatch.alert.suppressed", "reason": reason},
                        )
                        return AlertOutcome(
                            alert.alert_id, alert.user_id, "suppressed",
                            score=result.score, reason=reason,
                        )

                    payload = build_notification_payload(profile, alert, result)
                    try:
                        delivered = self.notifier.send_match(payload)
                        failure = None if delivered else "notifier_declined"
                    except NotifierError as e:
                        delivered = False
                        failure = str(e)

                    if not delivered:
                        self.logger.warning(
                            f"Notifier failed for alert {alert.alert_id}: {failure}",
                            extra={"event": "dispatch.alert.send_failed", "reason": failure},
                        )
                        return AlertOutcome(
                            alert.alert_id, alert.user_id, "send_failed",
                            score=result.score, reason=failure,
                        )

                    # Last step: stamp only after the notifier accepted the payload
                    sent_state = mark_sent(alert, now)
                    AlertRepository(session).mark_sent(alert.alert_id, sent_state.last_sent_at)

                self.logger.info(
                    f"Notification sent for alert {alert.alert_id}",
                    extra={"event": "dispatch.alert.sent", "score": round(result.score, 2)},
                )
                return AlertOutcome(alert.alert_id, alert.user_id, "sent", score=result.score)

            except Exception as e:
                self.logger.error(
                    f"Error processing alert {alert.alert_id}: {e}",
                    extra={"event": "dispatch.alert.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )
                return AlertOutcome(alert.alert_id, alert.user_id, "error", reason=str(e))

    def _send_digests(self, now: datetime) -> Tuple[int, int]:
        """Send every digest that is due and in its preferred slot.

        Returns:
            Tuple of (digests sent, users that failed)
        """
        try:
            with get_session() as session:
                preferences = PreferenceRepository(session).get_all()
        except Exception as e:
            self.logger.error(
                f"Failed to load preferences for digests: {e}",
                extra={"event": "dispatch.digest.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return 0, 1

        sent = 0
        errors = 0
        for pref in preferences:
            if not is_digest_due(pref, now):
                continue

            with log_context(user_id=pref.user_id):
                try:
                    if self._send_digest(pref, now):
                        sent += 1
                except Exception as e:
                    errors += 1
                    self.logger.error(
                        f"Error sending digest to {pref.user_id}: {e}",
                        extra={"event": "dispatch.digest.failed", "error_type": type(e).__name__},
                        exc_info=True,
                    )

        return sent, errors

    def _send_digest(self, pref: NotificationPreferenceState, now: datetime) -> bool:
        """Build and send one user's digest.

        Returns:
            True if a digest was sent and stamped, False if there was nothing to send

        Raises:
            NotifierError: If the notifier fails or declines the digest
        """
        with get_session() as session:
            profile = UserRepository(session).get(pref.user_id)
            if profile is None:
                self.logger.warning(
                    f"Preferences for {pref.user_id} have no user profile",
                    extra={"event": "dispatch.digest.orphaned"},
                )
                return False

            matches: List[Tuple[AlertCadenceState, MatchResult]] = []
            for alert in AlertRepository(session).get_for_user(pref.user_id):
                if not alert.is_active or already_reported(alert):
                    continue
                result = self.engine.match_alert(profile, alert)
                if result.matched and result.score >= pref.min_match_threshold:
                    matches.append((alert, result))

            if not matches:
                self.logger.debug(
                    f"No new matches for {pref.user_id}, skipping digest",
                    extra={"event": "dispatch.digest.empty"},
                )
                return False

            payload = build_digest_payload(profile, pref, matches, now)
            if not self.notifier.send_digest(payload):
                raise NotifierError(f"Notifier declined digest for {pref.user_id}")

            AlertRepository(session).mark_digested([alert.alert_id for alert, _ in matches], now)
            stamped = mark_digest_sent(pref, now)
            PreferenceRepository(session).mark_digest_sent(pref.user_id, stamped.last_digest_sent_at)

        self.logger.info(
            f"Digest sent to {pref.user_id} with {len(matches)} matches",
            extra={"event": "dispatch.digest.sent", "match_count": len(matches)},
        )
        return True


def already_reported(alert: AlertCadenceState) -> bool:
    """Whether the owner has heard about this alert, by email or in a digest."""
    return alert.last_sent_at is not None or alert.last_digested_at is not None


def suppression_reason(
    alert: AlertCadenceState, pref: NotificationPreferenceState, result: MatchResult
) -> Optional[str]:
    """Why a matched alert must not notify, or None when it may.

    Args:
        alert: The matched alert
        pref: Owner's preferences
        result: The alert's match result

    Returns:
        "alert_email_disabled", "opted_out", "email_disabled",
        "match_notifications_disabled", "below_user_threshold" or None
    """
    if not alert.send_email_notification:
        return "alert_email_disabled"
    if not pref.opted_in:
        return "opted_out"
    if not should_notify(pref):
        return "email_disabled"
    if not should_notify_match(pref, result):
        if not pref.match_notification_enabled:
            return "match_notifications_disabled"
        return "below_user_threshold"
    return None
