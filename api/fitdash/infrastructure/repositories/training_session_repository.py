"""
Repositorio de sesiones de entrenamiento agendadas.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import TrainingSessionModel


class TrainingSessionRepository:
    """Repositorio para gestionar sesiones de entrenamiento."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_by_id(self, session_id: str) -> Optional[TrainingSessionModel]:
        result = await self.db.execute(
            select(TrainingSessionModel).where(TrainingSessionModel.id == session_id)
        )
        return result.scalar_one_or_none()
    
    async def list_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        client_id: Optional[str] = None,
        trainer_id: Optional[str] = None,
        limit: int = 240
    ) -> List[TrainingSessionModel]:
        """
        Sesiones ordenadas por fecha, filtradas por rango y participante.
        """
        query = select(TrainingSessionModel)
        if client_id:
            query = query.where(TrainingSessionModel.client_id == client_id)
        if trainer_id:
            query = query.where(TrainingSessionModel.trainer_id == trainer_id)
        if start:
            query = query.where(TrainingSessionModel.scheduled_at >= start)
        if end:
            query = query.where(TrainingSessionModel.scheduled_at <= end)
        query = query.order_by(TrainingSessionModel.scheduled_at.asc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def list_for_participant(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 240
    ) -> List[TrainingSessionModel]:
        """Sesiones en las que el usuario es PT o cliente."""
        query = select(TrainingSessionModel).where(or_(
            TrainingSessionModel.client_id == user_id,
            TrainingSessionModel.trainer_id == user_id,
        ))
        if start:
            query = query.where(TrainingSessionModel.scheduled_at >= start)
        if end:
            query = query.where(TrainingSessionModel.scheduled_at <= end)
        query = query.order_by(TrainingSessionModel.scheduled_at.asc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def count_upcoming(self, trainer_id: str, since: datetime) -> int:
        result = await self.db.execute(
            select(func.count(TrainingSessionModel.id)).where(
                TrainingSessionModel.trainer_id == trainer_id,
                TrainingSessionModel.scheduled_at >= since,
            )
        )
        return int(result.scalar() or 0)
    
    async def create(self, **fields: Any) -> TrainingSessionModel:
        session = TrainingSessionModel(**fields)
        self.db.add(session)
        await self.db.flush()
        await self.db.refresh(session)
        
        logger.info(f"Sesion creada: {session.id} ({session.scheduled_at})")
        return session
    
    async def update(self, session: TrainingSessionModel, changes: Dict[str, Any]) -> TrainingSessionModel:
        for key, value in changes.items():
            setattr(session, key, value)
        await self.db.flush()
        await self.db.refresh(session)
        return session
