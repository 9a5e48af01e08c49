import logging

from models.Notification import Notification
from utils.exceptions import (
    BatchWriteFailure, InvalidRequest, LookupFailure, NotificationWriteError, ValidationError
)

logger = logging.getLogger(__name__)

NOTIFICATIONS = 'notifications'
USERS = 'users'


def display_name(user_info, fallback):
    user_info = user_info or {}
    return user_info.get('username') or user_info.get('email') or fallback


class NotificationService:
    """Writes notification documents into the ``notifications`` collection."""

    def __init__(self, db):
        self.db = db

    # Usuarios

    def fetch_user(self, user_id):
        if not user_id:
            return None
        try:
            user_doc = self.db.collection(USERS).document(user_id).get()
        except Exception as e:
            raise LookupFailure(f"Could not read user {user_id}: {e}")
        return user_doc.to_dict() if user_doc.exists else None

    def get_user_info(self, user_id):
        """Best-effort profile lookup; unreadable profiles count as unknown."""
        try:
            return self.fetch_user(user_id)
        except LookupFailure as e:
            logger.error("Error fetching user info: %s", e.message)
            return None

    def find_user_by_username(self, username):
        """Return ``(user_id, data)`` for the first user with this exact username."""
        users = self.db.collection(USERS).where('username', '==', username).limit(1).stream()
        for user_doc in users:
            return user_doc.id, user_doc.to_dict()
        return None

    # Escrituras

    def _add(self, notification):
        try:
            self.db.collection(NOTIFICATIONS).add(notification.to_dict())
        except Exception as e:
            raise NotificationWriteError(f"Could not store notification: {e}")

    def _commit(self, notifications):
        batch = self.db.batch()
        collection = self.db.collection(NOTIFICATIONS)
        for notification in notifications:
            batch.set(collection.document(), notification.to_dict())
        try:
            batch.commit()
        except Exception as e:
            raise BatchWriteFailure(f"Could not commit {len(notifications)} notifications: {e}")
        return len(notifications)

    def notify_admin(self, notification_type, title, description, user_info=None, extra=None):
        self._add(Notification.for_admin(notification_type, title, description, user_info, extra))
        logger.info("Admin notification created: %s - %s", notification_type, title)

    def notify_user(self, user_id, notification_type, title, description, extra=None):
        self._add(Notification.for_user(user_id, notification_type, title, description, extra=extra))
        logger.info("User notification created for %s: %s - %s", user_id, notification_type, title)

    def notify_all(self, notification_type, title, description, from_user_id, extra=None):
        """Notify every user except the sender in one atomic batch.

        Returns the number of notifications written.
        """
        recipients = [
            user_doc.id for user_doc in self.db.collection(USERS).stream()
            if user_doc.id != from_user_id
        ]
        if not recipients:
            logger.info("No users found for @all notification")
            return 0
        count = self._commit([
            Notification.for_user(user_id, notification_type, title, description,
                                  from_user_id=from_user_id, extra=extra)
            for user_id in recipients
        ])
        logger.info("@all notification created for %d users: %s - %s", count, notification_type, title)
        return count

    def notify_users(self, user_ids, notification_type, title, description, extra=None):
        count = self._commit([
            Notification.for_user(user_id, notification_type, title, description, extra=extra)
            for user_id in user_ids
        ])
        logger.info("Notification created for %d users: %s - %s", count, notification_type, title)
        return count

    def create_manual_notification(self, data):
        """Admin-issued notification: explicit users, or the admin feed."""
        data = data or {}
        notification_type = data.get('type')
        title = data.get('title')
        description = data.get('description')
        user_ids = data.get('userIds')

        if not all([notification_type, title, description]):
            raise ValidationError("Missing required fields")

        if isinstance(user_ids, list) and user_ids:
            if not all(isinstance(user_id, str) and user_id for user_id in user_ids):
                raise InvalidRequest("userIds must be non-empty strings")
            count = self.notify_users(user_ids, notification_type, title, description,
                                      extra={'manual': True})
            return {'success': True, 'count': count}
        if data.get('isAdminNotification'):
            self.notify_admin(notification_type, title, description, None, {'manual': True})
            return {'success': True, 'type': 'admin'}
        raise InvalidRequest()
