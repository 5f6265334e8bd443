"""
Casos de uso de mensajeria y notificaciones.
"""
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.message_dto import MessageCreateDTO, MessageDTO, NotificationDTO
from fitdash.application.services.messages_dashboard_builder import normalize_channel
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.repositories.message_repository import MessageRepository
from fitdash.infrastructure.repositories.notification_repository import NotificationRepository
from fitdash.infrastructure.repositories.user_repository import UserRepository
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException
from fitdash.shared.utils.datetime_utils import DateTimeUtils


class MessageUseCases:
    """Bandeja de mensajes directos entre usuarios."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.messages = MessageRepository(db)
        self.users = UserRepository(db)
    
    async def list_messages(
        self,
        viewer: SessionUser,
        counterpart_id: Optional[str] = None,
    ) -> Tuple[List[MessageDTO], int]:
        rows = await self.messages.list_for_user(viewer.id, counterpart_id=counterpart_id)
        unread = await self.messages.count_unread(viewer.id)
        return [MessageDTO.model_validate(row) for row in rows], unread
    
    async def send(self, viewer: SessionUser, dto: MessageCreateDTO) -> MessageDTO:
        body = dto.body.strip()
        if not body:
            raise ValidationException("El mensaje está vacío", field="body")
        if dto.to_id == viewer.id:
            raise ValidationException("No puedes enviarte mensajes a ti mismo", field="to_id")
        if not await self.users.get_by_id(dto.to_id):
            raise EntityNotFoundException("Usuario", dto.to_id)
        
        message = await self.messages.create(
            from_id=viewer.id,
            to_id=dto.to_id,
            body=body,
            channel=normalize_channel(dto.channel),
            reply_to_id=dto.reply_to_id,
            sent_at=DateTimeUtils.now_utc(),
        )
        return MessageDTO.model_validate(message)
    
    async def mark_read(self, viewer: SessionUser, message_id: str) -> MessageDTO:
        message = await self.messages.get_by_id(message_id)
        if not message:
            raise EntityNotFoundException("Mensaje", message_id)
        if message.to_id != viewer.id:
            raise ForbiddenException("Solo el destinatario puede marcar el mensaje como leído")
        message = await self.messages.mark_read(message)
        return MessageDTO.model_validate(message)


class NotificationUseCases:
    """Notificaciones del usuario de la sesion."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationRepository(db)
    
    async def list_notifications(self, viewer: SessionUser, unread_only: bool = False) -> Tuple[List[NotificationDTO], int]:
        rows = await self.notifications.list_for_user(viewer.id, unread_only=unread_only)
        unread = await self.notifications.count_unread(viewer.id)
        return [NotificationDTO.model_validate(row) for row in rows], unread
    
    async def mark_read(self, viewer: SessionUser, notification_id: str) -> NotificationDTO:
        notification = await self.notifications.get_by_id(notification_id)
        if not notification:
            raise EntityNotFoundException("Notificacion", notification_id)
        if notification.user_id != viewer.id:
            raise ForbiddenException("La notificación no es tuya")
        notification = await self.notifications.mark_read(notification)
        return NotificationDTO.model_validate(notification)
    
    async def mark_all_read(self, viewer: SessionUser) -> int:
        return await self.notifications.mark_all_read(viewer.id)
