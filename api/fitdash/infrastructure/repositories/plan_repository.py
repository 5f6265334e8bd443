"""
Repositorio para operaciones de persistencia de TrainingPlan.
"""
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import TrainingPlanModel


class PlanRepository:
    """
    Repositorio para operaciones CRUD de TrainingPlan.
    
    Proporciona metodos para:
    - Crear y actualizar planes
    - Recuperar planes por cliente o por PT
    """
    
    def __init__(self, db: AsyncSession):
        """
        Inicializa el repositorio con una sesion de base de datos.
        
        Args:
            db: Sesion asincrona de SQLAlchemy
        """
        self.db = db
    
    async def create(self, **fields: Any) -> TrainingPlanModel:
        """
        Crea un nuevo plan de entrenamiento.
        
        Args:
            **fields: Columnas del plan (title, status, client_id, trainer_id...)
            
        Returns:
            TrainingPlanModel: Modelo creado
        """
        plan = TrainingPlanModel(**fields)
        self.db.add(plan)
        await self.db.flush()
        await self.db.refresh(plan)
        
        logger.info(f"TrainingPlan creado: {plan.id} ({plan.title})")
        return plan
    
    async def get_by_id(self, plan_id: str) -> Optional[TrainingPlanModel]:
        query = select(TrainingPlanModel).where(TrainingPlanModel.id == plan_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
    
    async def get_by_client(self, client_id: str, limit: int = 20) -> List[TrainingPlanModel]:
        """Planes de un cliente, los mas recientes primero."""
        query = (
            select(TrainingPlanModel)
            .where(TrainingPlanModel.client_id == client_id)
            .order_by(TrainingPlanModel.updated_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def get_by_trainer(self, trainer_id: str, limit: int = 240) -> List[TrainingPlanModel]:
        query = (
            select(TrainingPlanModel)
            .where(TrainingPlanModel.trainer_id == trainer_id)
            .order_by(TrainingPlanModel.updated_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def list_all(self, status: Optional[str] = None, limit: int = 240) -> List[TrainingPlanModel]:
        query = select(TrainingPlanModel)
        if status:
            query = query.where(TrainingPlanModel.status == status)
        query = query.order_by(TrainingPlanModel.updated_at.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def update(self, plan: TrainingPlanModel, changes: Dict[str, Any]) -> TrainingPlanModel:
        """Aplica los cambios indicados y devuelve el plan refrescado."""
        for key, value in changes.items():
            setattr(plan, key, value)
        await self.db.flush()
        await self.db.refresh(plan)
        
        logger.info(f"TrainingPlan {plan.id} actualizado: {sorted(changes)}")
        return plan
