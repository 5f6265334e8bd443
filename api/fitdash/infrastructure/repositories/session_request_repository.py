"""
Repositorio de pedidos de sesion / reagendamiento.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import SessionRequestModel


class SessionRequestRepository:
    """Repositorio para pedidos de sesion."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_by_id(self, request_id: str) -> Optional[SessionRequestModel]:
        result = await self.db.execute(
            select(SessionRequestModel).where(SessionRequestModel.id == request_id)
        )
        return result.scalar_one_or_none()
    
    async def list_for_trainer(self, trainer_id: str, limit: int = 120) -> List[SessionRequestModel]:
        result = await self.db.execute(
            select(SessionRequestModel)
            .where(SessionRequestModel.trainer_id == trainer_id)
            .order_by(SessionRequestModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    
    async def list_for_client(self, client_id: str, limit: int = 60) -> List[SessionRequestModel]:
        result = await self.db.execute(
            select(SessionRequestModel)
            .where(SessionRequestModel.client_id == client_id)
            .order_by(SessionRequestModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    
    async def list_recent(self, status: Optional[str] = None, limit: int = 120) -> List[SessionRequestModel]:
        query = select(SessionRequestModel)
        if status:
            query = query.where(func.lower(SessionRequestModel.status) == status.lower())
        result = await self.db.execute(query.order_by(SessionRequestModel.created_at.desc()).limit(limit))
        return list(result.scalars().all())
    
    async def count_pending(self, trainer_id: Optional[str] = None) -> int:
        """Pedidos pendientes de un PT (o de todos si trainer_id es None)."""
        query = select(func.count(SessionRequestModel.id)).where(
            func.lower(SessionRequestModel.status) == "pending"
        )
        if trainer_id:
            query = query.where(SessionRequestModel.trainer_id == trainer_id)
        result = await self.db.execute(query)
        return int(result.scalar() or 0)
    
    async def create(self, **fields: Any) -> SessionRequestModel:
        request = SessionRequestModel(**fields)
        self.db.add(request)
        await self.db.flush()
        await self.db.refresh(request)
        return request
    
    async def decide(
        self,
        request: SessionRequestModel,
        status: str,
        actor_id: str,
        session_id: Optional[str] = None
    ) -> SessionRequestModel:
        """Marca el pedido como aprobado/rechazado."""
        request.status = status
        request.decided_by = actor_id
        request.decided_at = datetime.now(timezone.utc)
        if session_id:
            request.session_id = session_id
        await self.db.flush()
        await self.db.refresh(request)
        return request
