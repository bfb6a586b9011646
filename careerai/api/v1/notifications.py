"""Notification list / mark-as-read API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from careerai.api.deps import get_services
from careerai.auth.supabase_auth import verify_jwt
from careerai.jobs.errors import ValidationError
from careerai.services import Services

router = APIRouter()


class MarkNotificationsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notification_ids: Optional[List[str]] = Field(default=None, alias="notificationIds")
    read: bool = True


@router.get("/notifications")
async def list_notifications(
    unread: bool = False,
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    notifications = await services.notification_store.list_for_user(
        user_id, unread_only=unread, limit=limit
    )
    return {"notifications": [n.to_row() for n in notifications]}


@router.put("/notifications")
async def mark_notifications(
    request: MarkNotificationsRequest,
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    if not request.notification_ids:
        raise ValidationError("Notification IDs are required")

    updated = await services.notification_store.set_read(
        user_id, request.notification_ids, read=request.read
    )
    state = "read" if request.read else "unread"
    return {
        "success": True,
        "updated": updated,
        "message": f"{len(request.notification_ids)} notifications marked as {state}",
    }
