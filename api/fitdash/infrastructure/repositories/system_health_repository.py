"""
Repositorio de lecturas de salud del sistema.
"""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import (
    SystemMonitorModel,
    SystemResiliencePracticeModel,
    SystemServiceModel,
)


class SystemHealthRepository:
    """Lee servicios, monitores y practicas de resiliencia en orden de visualizacion."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list_services(self) -> List[SystemServiceModel]:
        result = await self.db.execute(
            select(SystemServiceModel)
            .order_by(SystemServiceModel.display_order.asc(), SystemServiceModel.name.asc())
        )
        return list(result.scalars().all())
    
    async def list_monitors(self) -> List[SystemMonitorModel]:
        result = await self.db.execute(
            select(SystemMonitorModel)
            .order_by(SystemMonitorModel.display_order.asc(), SystemMonitorModel.id.asc())
        )
        return list(result.scalars().all())
    
    async def list_resilience(self) -> List[SystemResiliencePracticeModel]:
        result = await self.db.execute(
            select(SystemResiliencePracticeModel)
            .order_by(SystemResiliencePracticeModel.display_order.asc(), SystemResiliencePracticeModel.id.asc())
        )
        return list(result.scalars().all())
