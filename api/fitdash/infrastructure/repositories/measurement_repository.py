"""
Repositorio de mediciones antropometricas.
"""
from typing import Any, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import AnthropometryModel


class MeasurementRepository:
    """Repositorio para la tabla anthropometry."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list_for_user(self, user_id: str, limit: int = 24) -> List[AnthropometryModel]:
        """Mediciones mas recientes primero."""
        result = await self.db.execute(
            select(AnthropometryModel)
            .where(AnthropometryModel.user_id == user_id)
            .order_by(AnthropometryModel.measured_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    
    async def create(self, **fields: Any) -> AnthropometryModel:
        measurement = AnthropometryModel(**fields)
        self.db.add(measurement)
        await self.db.flush()
        await self.db.refresh(measurement)
        return measurement
