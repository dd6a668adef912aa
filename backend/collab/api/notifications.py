"""
Inbox routes: proposal and milestone events addressed to the caller.
"""

from uuid import UUID

from fastapi import APIRouter, Query

from collab.api.deps import CurrentActor, NotificationRepo
from collab.core.exceptions import NotFoundError
from collab.models.base import CollabModel
from collab.models.notification import Notification

router = APIRouter()


class NotificationListResponse(CollabModel):
    """One page of the caller's inbox plus the overall unread badge count."""

    notifications: list[Notification]
    unread_count: int
    total: int


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    actor: CurrentActor,
    notification_repo: NotificationRepo,
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    page = await notification_repo.list(actor.id, unread_only=unread_only, limit=limit, offset=offset)
    return NotificationListResponse(
        notifications=page,
        unread_count=await notification_repo.get_unread_count(actor.id),
        total=len(page),
    )


@router.post("/read-all")
async def read_all(actor: CurrentActor, notification_repo: NotificationRepo) -> dict[str, int]:
    """Clear the caller's unread badge."""
    return {"updatedCount": await notification_repo.mark_all_as_read(actor.id)}


@router.post("/{notification_id}/read", response_model=Notification)
async def read_one(notification_id: UUID, actor: CurrentActor, notification_repo: NotificationRepo):
    """Mark one notification read; other users' notifications look missing."""
    notification = await notification_repo.mark_as_read(actor.id, notification_id)
    if notification is None:
        raise NotFoundError(f"Notification {notification_id} not found")
    return notification
