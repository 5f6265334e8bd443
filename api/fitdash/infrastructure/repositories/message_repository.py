"""
Repositorio de mensajes directos.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import MessageModel


class MessageRepository:
    """Repositorio para mensajes."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list_for_user(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        counterpart_id: Optional[str] = None,
        limit: int = 500
    ) -> List[MessageModel]:
        """
        Mensajes enviados o recibidos por el usuario, en orden cronologico.
        Con `counterpart_id` se limita a la conversacion con ese contacto.
        """
        if counterpart_id:
            condition = or_(
                and_(MessageModel.from_id == user_id, MessageModel.to_id == counterpart_id),
                and_(MessageModel.from_id == counterpart_id, MessageModel.to_id == user_id),
            )
        else:
            condition = or_(MessageModel.from_id == user_id, MessageModel.to_id == user_id)
        query = select(MessageModel).where(condition)
        if since:
            query = query.where(MessageModel.sent_at >= since)
        query = query.order_by(MessageModel.sent_at.asc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def count_unread(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(MessageModel.id)).where(
                MessageModel.to_id == user_id,
                MessageModel.read_at.is_(None),
            )
        )
        return int(result.scalar() or 0)
    
    async def get_by_id(self, message_id: str) -> Optional[MessageModel]:
        result = await self.db.execute(
            select(MessageModel).where(MessageModel.id == message_id)
        )
        return result.scalar_one_or_none()
    
    async def create(self, **fields: Any) -> MessageModel:
        message = MessageModel(**fields)
        self.db.add(message)
        await self.db.flush()
        await self.db.refresh(message)
        return message
    
    async def mark_read(self, message: MessageModel) -> MessageModel:
        if message.read_at is None:
            message.read_at = datetime.now(timezone.utc)
            await self.db.flush()
        return message
