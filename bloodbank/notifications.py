"""Notification sink — append-only user-facing messages with a read flag."""

import logging

from bloodbank import records
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.models import Notification, NotificationType
from bloodbank.records import RecordStore

logger = logging.getLogger("bloodbank.notifications")


def _newest_first(items: list[Notification]) -> list[Notification]:
    return sorted(items, key=lambda n: n.created_at, reverse=True)


class NotificationSink:
    def __init__(self, store: RecordStore, clock: Clock = utc_now, id_factory: IdFactory = new_id):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    def post(
        self,
        user_id: str | None,
        title: str,
        message: str,
        type: NotificationType | str = NotificationType.info,
    ) -> Notification:
        """Append an unread notification. ``user_id=None`` broadcasts."""
        notification = Notification(
            id=self.id_factory(),
            user_id=user_id,
            title=title,
            message=message,
            type=NotificationType(type),
            read=False,
            created_at=self.clock(),
        )
        self.store.add(records.NOTIFICATIONS, notification)
        logger.info("Notification %r -> %s", title, user_id or "broadcast")
        return notification

    def mark_read(self, notification_id: str) -> Notification | None:
        notification = self.store.get_by_id(records.NOTIFICATIONS, notification_id)
        if notification is None:
            return None
        notification = notification.model_copy(update={"read": True})
        return self.store.update(records.NOTIFICATIONS, notification)

    def list_for_user(self, user_id: str) -> list[Notification]:
        return _newest_first(self.store.filter(records.NOTIFICATIONS, user_id=user_id))

    def list_all(self) -> list[Notification]:
        """Admin view — every notification, broadcasts included."""
        return _newest_first(self.store.get_all(records.NOTIFICATIONS))

    def unread_count(self, user_id: str) -> int:
        return sum(1 for n in self.store.filter(records.NOTIFICATIONS, user_id=user_id) if not n.read)
