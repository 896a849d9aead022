"""
Data access for the notifications collection.
"""

from __future__ import annotations

from typing import List, Optional

from backend.repositories.base import Repository
from shared.constants import DEFAULT_NOTIFICATIONS_LIMIT, NOTIFICATIONS_COLLECTION
from shared.time_utils import utc_now
from shared.types import Notification


class NotificationRepository(Repository[Notification]):
    collection = NOTIFICATIONS_COLLECTION
    model = Notification
    resource_name = "Notification"

    def create(
        self,
        user_id: str,
        type: str,
        title: str,
        body: str,
        data: Optional[dict] = None,
        priority: str = "normal",
    ) -> Notification:
        now = utc_now()
        doc = {
            "userId": user_id,
            "type": type,
            "title": title,
            "body": body,
            "data": data or {},
            "priority": priority,
            "read": False,
            "createdAt": now,
            "updatedAt": now,
        }
        doc_id = self.store.add(self.collection, doc)
        return self._load(doc_id, doc)

    def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: Optional[int] = DEFAULT_NOTIFICATIONS_LIMIT,
    ) -> List[Notification]:
        filters = [("userId", "==", user_id)]
        if unread_only:
            filters.append(("read", "==", False))
        records = self.store.query(
            self.collection, filters, order_by="createdAt", descending=True, limit=limit
        )
        return self._load_all(records)

    def _ids_for(self, user_id: str, read: bool) -> List[str]:
        records = self.store.query(
            self.collection, [("userId", "==", user_id), ("read", "==", read)]
        )
        return [doc_id for doc_id, _ in records]

    def mark_read(self, notification_id: str) -> Notification:
        return self.update(notification_id, {"read": True})

    def mark_all_read(self, user_id: str) -> int:
        unread = self._ids_for(user_id, read=False)
        for notification_id in unread:
            self.store.update(
                self.collection, notification_id, {"read": True, "updatedAt": utc_now()}
            )
        return len(unread)

    def delete_read(self, user_id: str) -> int:
        read = self._ids_for(user_id, read=True)
        for notification_id in read:
            self.store.delete(self.collection, notification_id)
        return len(read)

    def unread_count(self, user_id: str) -> int:
        return len(self._ids_for(user_id, read=False))
