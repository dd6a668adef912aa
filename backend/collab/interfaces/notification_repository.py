"""
Inbox storage contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from collab.models.notification import Notification, NotificationCreate


class INotificationRepository(ABC):
    """Per-user notifications with a read flag."""

    @abstractmethod
    async def create_bulk(self, notifications: list[NotificationCreate]) -> list[Notification]:
        """Store a batch sharing one creation timestamp."""

    @abstractmethod
    async def list(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Notification]:
        """Newest first."""

    @abstractmethod
    async def mark_as_read(self, user_id: str, notification_id: UUID) -> Optional[Notification]:
        """None when the notification is missing or belongs to another user."""

    @abstractmethod
    async def get_unread_count(self, user_id: str) -> int:
        ...

    @abstractmethod
    async def mark_all_as_read(self, user_id: str) -> int:
        """Returns how many rows flipped to read."""
