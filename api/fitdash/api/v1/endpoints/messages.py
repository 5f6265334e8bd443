"""
Endpoints de mensajes y notificaciones.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from fitdash.api.v1.dependencies.auth_deps import require_user
from fitdash.api.v1.dependencies.use_case_deps import get_message_use_cases, get_notification_use_cases
from fitdash.application.dto.common_dto import OkDTO
from fitdash.application.dto.message_dto import (
    MessageCreateDTO,
    MessageListDTO,
    MessageResponseDTO,
    NotificationListDTO,
)
from fitdash.application.use_cases.message_use_cases import MessageUseCases, NotificationUseCases
from fitdash.domain.entities.session_user import SessionUser


router = APIRouter(prefix="/messages", tags=["Messages"])
notifications_router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=MessageListDTO)
async def list_messages(
    counterpart_id: Optional[str] = Query(None, alias="with"),
    user: SessionUser = Depends(require_user),
    use_cases: MessageUseCases = Depends(get_message_use_cases),
):
    messages, unread = await use_cases.list_messages(user, counterpart_id)
    return MessageListDTO(messages=messages, unread=unread)


@router.post("", response_model=MessageResponseDTO, status_code=status.HTTP_201_CREATED)
async def send_message(
    dto: MessageCreateDTO,
    user: SessionUser = Depends(require_user),
    use_cases: MessageUseCases = Depends(get_message_use_cases),
):
    return MessageResponseDTO(message=await use_cases.send(user, dto))


@router.post("/{message_id}/read", response_model=MessageResponseDTO)
async def mark_message_read(
    message_id: str,
    user: SessionUser = Depends(require_user),
    use_cases: MessageUseCases = Depends(get_message_use_cases),
):
    return MessageResponseDTO(message=await use_cases.mark_read(user, message_id))


@notifications_router.get("", response_model=NotificationListDTO)
async def list_notifications(
    unread: bool = Query(False, description="Solo no leidas"),
    user: SessionUser = Depends(require_user),
    use_cases: NotificationUseCases = Depends(get_notification_use_cases),
):
    notifications, unread_count = await use_cases.list_notifications(user, unread_only=unread)
    return NotificationListDTO(notifications=notifications, unread=unread_count)


@notifications_router.post("/read-all", response_model=OkDTO)
async def mark_all_notifications_read(
    user: SessionUser = Depends(require_user),
    use_cases: NotificationUseCases = Depends(get_notification_use_cases),
):
    return OkDTO(count=await use_cases.mark_all_read(user))


@notifications_router.post("/{notification_id}/read", response_model=OkDTO)
async def mark_notification_read(
    notification_id: str,
    user: SessionUser = Depends(require_user),
    use_cases: NotificationUseCases = Depends(get_notification_use_cases),
):
    await use_cases.mark_read(user, notification_id)
    return OkDTO()
