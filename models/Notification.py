from firebase_admin import firestore

class Notification:
    """A notification document.

    Exactly one addressing mode: admin-facing (``is_admin_notification`` and no
    ``user_id``) or targeted at a single user (``user_id`` set).
    """
    def __init__(self, notification_type, title, description, user_id=None,
                 is_admin_notification=False, from_user_id=None, extra=None):
        if is_admin_notification == bool(user_id):
            raise ValueError("Notification must target either the admins or a single user")
        self.notification_type = notification_type  # 'payment_submission', 'mention', etc.
        self.title = title
        self.description = description
        self.user_id = user_id
        self.is_admin_notification = is_admin_notification
        self.from_user_id = from_user_id
        self.extra = dict(extra or {})
        self.is_read = False
        self.created_at = firestore.SERVER_TIMESTAMP

    @classmethod
    def for_admin(cls, notification_type, title, description, user_info=None, extra=None):
        extra = dict(extra or {})
        extra['userInfo'] = user_info
        return cls(notification_type, title, description, is_admin_notification=True, extra=extra)

    @classmethod
    def for_user(cls, user_id, notification_type, title, description, from_user_id=None, extra=None):
        return cls(notification_type, title, description, user_id=user_id,
                   from_user_id=from_user_id, extra=extra)

    def to_dict(self):
        data = dict(self.extra)
        data.update({
            "type": self.notification_type,
            "title": self.title,
            "description": self.description,
            "isAdminNotification": self.is_admin_notification,
            "isRead": self.is_read,
            "createdAt": self.created_at
        })
        if self.user_id:
            data["userId"] = self.user_id
        else:
            data.pop("userId", None)
        if self.from_user_id:
            data["fromUserId"] = self.from_user_id
        return data
