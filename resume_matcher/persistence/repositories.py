"""Data access layer (repositories) for the state store.

This module provides repository classes for users, alerts and notification
preferences. Repositories encapsulate database operations and return domain
models rather than ORM models.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from resume_matcher.domain.models import (
    AlertCadenceState,
    NotificationPreferenceState,
    UserProfile,
)
from resume_matcher.logging import get_logger

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import AlertModel, PreferenceModel, UserModel, _format_datetime

logger = get_logger(__name__, component="database")


class UserRepository:
    """Repository for candidate profiles."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Optional[UserProfile]:
        """Retrieve a profile by user id.

        Returns:
            UserProfile if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            row = self.session.get(UserModel, user_id)
            return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def upsert(self, profile: UserProfile) -> UserProfile:
        """Insert a new profile or replace an existing one.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            self.session.merge(UserModel.from_domain(profile))
            self.session.flush()
            return profile
        except SQLAlchemyError as e:
            logger.error(f"Error upserting user {profile.user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert user: {e}") from e


class AlertRepository:
    """Repository for job alerts and their cadence state."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, alert_id: str) -> Optional[AlertCadenceState]:
        """Retrieve an alert by id, or None.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            row = self.session.get(AlertModel, alert_id)
            return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve alert: {e}") from e

    def add(self, alert: AlertCadenceState) -> AlertCadenceState:
        """Insert a new alert.

        Raises:
            DataIntegrityError: If the alert id already exists or the owner is unknown
            PersistenceError: If database error occurs
        """
        try:
            self.session.add(AlertModel.from_domain(alert))
            self.session.flush()
            return alert
        except IntegrityError as e:
            logger.error(f"Integrity error adding alert {alert.alert_id}: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Failed to add alert due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding alert {alert.alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add alert: {e}") from e

    def get_active(self, limit: Optional[int] = None) -> List[AlertCadenceState]:
        """Return active alerts, least recently evaluated first.

        Args:
            limit: Maximum number of alerts to return (None for all)

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(AlertModel)
                .where(AlertModel.is_active.is_(True))
                .order_by(
                    AlertModel.last_evaluated_at.is_not(None),
                    AlertModel.last_evaluated_at,
                    AlertModel.alert_id,
                )
            )
            if limit:
                stmt = stmt.limit(limit)
            rows = self.session.execute(stmt).scalars().all()
            return [row.to_domain() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving active alerts: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve active alerts: {e}") from e

    def get_for_user(self, user_id: str) -> List[AlertCadenceState]:
        """Return every alert a user owns, active or not.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(AlertModel)
                .where(AlertModel.user_id == user_id)
                .order_by(AlertModel.alert_id)
            )
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving alerts for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve alerts: {e}") from e

    def mark_sent(self, alert_id: str, sent_at: datetime) -> bool:
        """Advance ``last_sent_at`` in one conditional UPDATE.

        The row only changes when it has never been sent or its stamp is not
        newer than ``sent_at``, so concurrent writers cannot move the stamp
        backwards.

        Args:
            alert_id: Alert to update
            sent_at: Time of the successful send (UTC)

        Returns:
            True if the stamp was written, False if a newer stamp was kept

        Raises:
            RecordNotFoundError: If alert_id doesn't exist
            PersistenceError: If database error occurs
        """
        stamp = _format_datetime(sent_at)
        try:
            stmt = (
                update(AlertModel)
                .where(
                    AlertModel.alert_id == alert_id,
                    or_(AlertModel.last_sent_at.is_(None), AlertModel.last_sent_at <= stamp),
                )
                .values(last_sent_at=stamp)
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            self.session.flush()

            if result.rowcount:
                return True

            if self.session.get(AlertModel, alert_id) is None:
                raise RecordNotFoundError(f"Alert with id {alert_id} not found")

            logger.info(
                f"Kept newer last_sent_at for alert {alert_id}",
                extra={"event": "alerts.mark_sent.stale", "alert_id": alert_id},
            )
            return False

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error marking alert {alert_id} as sent: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark alert as sent: {e}") from e

    def mark_evaluated(self, alert_ids: Sequence[str], evaluated_at: datetime) -> int:
        """Stamp ``last_evaluated_at`` on the alerts a cycle picked up.

        Stamps never move backwards. Unknown ids are ignored.

        Returns:
            Number of rows updated

        Raises:
            PersistenceError: If database error occurs
        """
        return self._stamp_many("last_evaluated_at", alert_ids, evaluated_at)

    def mark_digested(self, alert_ids: Sequence[str], digested_at: datetime) -> int:
        """Stamp ``last_digested_at`` on the alerts a digest reported.

        Returns:
            Number of rows updated

        Raises:
            PersistenceError: If database error occurs
        """
        return self._stamp_many("last_digested_at", alert_ids, digested_at)

    def _stamp_many(self, column_name: str, alert_ids: Sequence[str], at: datetime) -> int:
        if not alert_ids:
            return 0

        column = getattr(AlertModel, column_name)
        stamp = _format_datetime(at)
        try:
            stmt = (
                update(AlertModel)
                .where(
                    AlertModel.alert_id.in_(list(alert_ids)),
                    or_(column.is_(None), column <= stamp),
                )
                .values({column_name: stamp})
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error updating {column_name} on alerts: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update {column_name}: {e}") from e

    def set_active(self, alert_id: str, is_active: bool) -> None:
        """Activate or deactivate an alert.

        Raises:
            RecordNotFoundError: If alert_id doesn't exist
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                update(AlertModel)
                .where(AlertModel.alert_id == alert_id)
                .values(is_active=is_active)
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            self.session.flush()

            if result.rowcount == 0:
                raise RecordNotFoundError(f"Alert with id {alert_id} not found")

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update alert: {e}") from e


class PreferenceRepository:
    """Repository for per-user notification preferences."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Optional[NotificationPreferenceState]:
        """Retrieve a user's preferences, or None if they have none stored.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            row = self.session.get(PreferenceModel, user_id)
            return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving preferences for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve preferences: {e}") from e

    def get_all(self) -> List[NotificationPreferenceState]:
        """Return every stored preference row ordered by user id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(PreferenceModel).order_by(PreferenceModel.user_id)
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving preferences: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve preferences: {e}") from e

    def save(self, pref: NotificationPreferenceState) -> NotificationPreferenceState:
        """Insert or replace a user's preferences.

        Raises:
            DataIntegrityError: If the user does not exist
            PersistenceError: If database error occurs
        """
        try:
            row = self.session.get(PreferenceModel, pref.user_id)
            if row is None:
                self.session.add(PreferenceModel.from_domain(pref))
            else:
                row.apply(pref)
            self.session.flush()
            return pref
        except IntegrityError as e:
            logger.error(f"Integrity error saving preferences for {pref.user_id}: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Failed to save preferences due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving preferences for {pref.user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save preferences: {e}") from e

    def mark_digest_sent(self, user_id: str, sent_at: datetime) -> bool:
        """Advance ``last_digest_sent_at`` with the same monotonic rule as alerts.

        Returns:
            True if the stamp was written, False if a newer stamp was kept

        Raises:
            RecordNotFoundError: If the user has no stored preferences
            PersistenceError: If database error occurs
        """
        stamp = _format_datetime(sent_at)
        try:
            stmt = (
                update(PreferenceModel)
                .where(
                    PreferenceModel.user_id == user_id,
                    or_(
                        PreferenceModel.last_digest_sent_at.is_(None),
                        PreferenceModel.last_digest_sent_at <= stamp,
                    ),
                )
                .values(last_digest_sent_at=stamp)
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            self.session.flush()

            if result.rowcount:
                return True
            if self.session.get(PreferenceModel, user_id) is None:
                raise RecordNotFoundError(f"Preferences for user {user_id} not found")
            return False

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error marking digest sent for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark digest as sent: {e}") from e
