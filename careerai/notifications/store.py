"""Notification persistence (``notifications`` table)."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List

from careerai.db.supabase_client import execute
from careerai.notifications.models import NotificationRecord


class NotificationStore(ABC):

    @abstractmethod
    async def create(self, notification: NotificationRecord) -> NotificationRecord:
        ...

    @abstractmethod
    async def list_for_user(
        self, user_id: str, unread_only: bool = False, limit: int = 20
    ) -> List[NotificationRecord]:
        """Newest first."""
        ...

    @abstractmethod
    async def set_read(self, user_id: str, ids: Iterable[str], read: bool = True) -> int:
        """Toggle the read flag on the caller's own notifications. Returns rows touched."""
        ...


class SupabaseNotificationStore(NotificationStore):

    def __init__(self, client, table: str = "notifications"):
        self._client = client
        self._table = table

    async def create(self, notification: NotificationRecord) -> NotificationRecord:
        response = await execute(
            self._client.table(self._table).insert(notification.to_row())
        )
        if response.data:
            return NotificationRecord.from_row(response.data[0])
        return notification

    async def list_for_user(self, user_id, unread_only=False, limit=20):
        query = (
            self._client.table(self._table)
            .select("*")
            .eq("user_id", user_id)
        )
        if unread_only:
            query = query.eq("read", False)
        query = query.order("created_at", desc=True).limit(limit)
        response = await execute(query)
        return [NotificationRecord.from_row(r) for r in response.data or []]

    async def set_read(self, user_id, ids, read=True) -> int:
        ids = list(ids)
        if not ids:
            return 0
        response = await execute(
            self._client.table(self._table)
            .update({"read": read})
            .eq("user_id", user_id)
            .in_("id", ids)
        )
        return len(response.data or [])


class InMemoryNotificationStore(NotificationStore):

    def __init__(self):
        self._items: Dict[str, NotificationRecord] = {}

    async def create(self, notification: NotificationRecord) -> NotificationRecord:
        self._items[notification.id] = notification.model_copy(deep=True)
        return notification

    async def list_for_user(self, user_id, unread_only=False, limit=20):
        items = [
            n for n in self._items.values()
            if n.user_id == user_id and not (unread_only and n.read)
        ]
        items.sort(key=lambda n: n.created_at, reverse=True)
        return [n.model_copy(deep=True) for n in items[:limit]]

    async def set_read(self, user_id, ids, read=True) -> int:
        touched = 0
        for notification_id in ids:
            item = self._items.get(notification_id)
            if item is None or item.user_id != user_id:
                continue
            self._items[notification_id] = item.model_copy(update={"read": read})
            touched += 1
        return touched
