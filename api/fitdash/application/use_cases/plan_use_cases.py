"""
Casos de uso de planes de entrenamiento.
"""
from typing import Any, Dict, List

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.plan_dto import PlanCreateDTO, PlanDTO, PlanUpdateDTO
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database.models import TrainingPlanModel
from fitdash.infrastructure.repositories.audit_log_repository import AuditLogRepository
from fitdash.infrastructure.repositories.plan_repository import PlanRepository
from fitdash.infrastructure.repositories.user_repository import TrainerClientRepository
from fitdash.shared.constants.status_constants import PlanStatus
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException
from fitdash.shared.utils.audit_logger import AuditKind


def _plan_status(value: str) -> str:
    normalized = (value or "").strip().upper()
    if normalized not in PlanStatus.__members__:
        raise ValidationException(f"Estado de plan no reconocido: {value}", field="status")
    return normalized


class PlanUseCases:
    """
    Listado por rol, alta y edicion de planes.
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.plans = PlanRepository(db)
        self.links = TrainerClientRepository(db)
        self.audit = AuditLogRepository(db)
    
    async def list_plans(self, viewer: SessionUser) -> List[PlanDTO]:
        if viewer.is_admin:
            rows = await self.plans.list_all()
        elif viewer.is_pt:
            rows = await self.plans.get_by_trainer(viewer.id)
        else:
            rows = await self.plans.get_by_client(viewer.id)
        return [PlanDTO.model_validate(row) for row in rows]
    
    async def get_plan(self, viewer: SessionUser, plan_id: str) -> PlanDTO:
        plan = await self._get_visible(viewer, plan_id)
        return PlanDTO.model_validate(plan)
    
    async def create_plan(self, viewer: SessionUser, dto: PlanCreateDTO) -> PlanDTO:
        """
        Crea un plan. Un PT solo puede asignarlo a sus clientes.
        """
        trainer_id = (dto.trainer_id or None) if viewer.is_admin else viewer.id
        if dto.client_id and viewer.is_pt and not await self.links.is_linked(viewer.id, dto.client_id):
            raise ForbiddenException("El cliente no está vinculado a este PT")
        
        plan = await self.plans.create(
            title=dto.title.strip(),
            status=_plan_status(dto.status or PlanStatus.DRAFT.value),
            client_id=dto.client_id,
            trainer_id=trainer_id,
            start_date=dto.start_date,
            end_date=dto.end_date,
            notes=dto.notes,
            content=dto.content,
        )
        logger.info(f"Plan {plan.id} creado por {viewer.id}")
        return PlanDTO.model_validate(plan)
    
    async def update_plan(self, viewer: SessionUser, plan_id: str, dto: PlanUpdateDTO) -> PlanDTO:
        """
        Edita un plan. Solo el PT propietario o un ADMIN.
        """
        plan = await self.plans.get_by_id(plan_id)
        if not plan:
            raise EntityNotFoundException("Plan", plan_id)
        if not (viewer.is_admin or (viewer.is_pt and plan.trainer_id == viewer.id)):
            raise ForbiddenException("Solo el PT propietario puede editar el plan")
        
        changes: Dict[str, Any] = dto.model_dump(exclude_unset=True)
        for required in ("title", "status"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        if "status" in changes:
            changes["status"] = _plan_status(changes["status"])
        if changes.get("client_id") and viewer.is_pt and not await self.links.is_linked(viewer.id, changes["client_id"]):
            raise ForbiddenException("El cliente no está vinculado a este PT")
        start = changes.get("start_date", plan.start_date)
        end = changes.get("end_date", plan.end_date)
        if start and end and end < start:
            raise ValidationException("La fecha de fin es anterior a la de inicio", field="end_date")
        
        plan = await self.plans.update(plan, changes)
        if viewer.is_admin:
            await self.audit.record(
                AuditKind.PLAN_UPDATE, viewer.id, "plan", plan.id,
                "Plan editado por admin", {"fields": sorted(changes)},
            )
        return PlanDTO.model_validate(plan)
    
    async def _get_visible(self, viewer: SessionUser, plan_id: str) -> TrainingPlanModel:
        plan = await self.plans.get_by_id(plan_id)
        if not plan:
            raise EntityNotFoundException("Plan", plan_id)
        if viewer.is_admin or viewer.id in (plan.trainer_id, plan.client_id):
            return plan
        raise ForbiddenException("No tienes acceso a este plan")
