"""
Repositorio de notificaciones in-app.
"""
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import NotificationModel


class NotificationRepository:
    """Repositorio para notificaciones."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 24
    ) -> List[NotificationModel]:
        query = select(NotificationModel).where(NotificationModel.user_id == user_id)
        if unread_only:
            query = query.where(NotificationModel.read == False)  # noqa: E712
        query = query.order_by(NotificationModel.created_at.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def count_unread(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(NotificationModel.id)).where(
                NotificationModel.user_id == user_id,
                NotificationModel.read == False,  # noqa: E712
            )
        )
        return int(result.scalar() or 0)
    
    async def get_by_id(self, notification_id: str) -> Optional[NotificationModel]:
        result = await self.db.execute(
            select(NotificationModel).where(NotificationModel.id == notification_id)
        )
        return result.scalar_one_or_none()
    
    async def create_many(
        self,
        user_ids: Iterable[str],
        title: str,
        body: Optional[str] = None,
        type: Optional[str] = None
    ) -> int:
        """Crea la misma notificacion para varios usuarios. Devuelve cuantas."""
        rows = [
            NotificationModel(user_id=user_id, title=title, body=body, type=type)
            for user_id in dict.fromkeys(user_ids) if user_id
        ]
        self.db.add_all(rows)
        await self.db.flush()
        return len(rows)
    
    async def mark_read(self, notification: NotificationModel) -> NotificationModel:
        notification.read = True
        await self.db.flush()
        return notification
    
    async def mark_all_read(self, user_id: str) -> int:
        result = await self.db.execute(
            update(NotificationModel)
            .where(NotificationModel.user_id == user_id, NotificationModel.read == False)  # noqa: E712
            .values(read=True)
        )
        return int(result.rowcount or 0)
