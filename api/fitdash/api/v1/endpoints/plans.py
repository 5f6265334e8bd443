"""
Endpoints de planes de entrenamiento.
"""
from fastapi import APIRouter, Depends, status

from fitdash.api.v1.dependencies.auth_deps import require_staff, require_user
from fitdash.api.v1.dependencies.use_case_deps import get_plan_use_cases
from fitdash.application.dto.plan_dto import PlanCreateDTO, PlanListDTO, PlanResponseDTO, PlanUpdateDTO
from fitdash.application.use_cases.plan_use_cases import PlanUseCases
from fitdash.domain.entities.session_user import SessionUser


router = APIRouter(prefix="/plans", tags=["Plans"])


@router.get("", response_model=PlanListDTO)
async def list_plans(
    user: SessionUser = Depends(require_user),
    use_cases: PlanUseCases = Depends(get_plan_use_cases),
):
    """Planes visibles para el rol: todos (ADMIN), propios (PT) o asignados (CLIENT)."""
    return PlanListDTO(plans=await use_cases.list_plans(user))


@router.post("", response_model=PlanResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_plan(
    dto: PlanCreateDTO,
    user: SessionUser = Depends(require_staff),
    use_cases: PlanUseCases = Depends(get_plan_use_cases),
):
    return PlanResponseDTO(plan=await use_cases.create_plan(user, dto))


@router.get("/{plan_id}", response_model=PlanResponseDTO)
async def get_plan(
    plan_id: str,
    user: SessionUser = Depends(require_user),
    use_cases: PlanUseCases = Depends(get_plan_use_cases),
):
    return PlanResponseDTO(plan=await use_cases.get_plan(user, plan_id))


@router.patch("/{plan_id}", response_model=PlanResponseDTO)
async def update_plan(
    plan_id: str,
    dto: PlanUpdateDTO,
    user: SessionUser = Depends(require_staff),
    use_cases: PlanUseCases = Depends(get_plan_use_cases),
):
    return PlanResponseDTO(plan=await use_cases.update_plan(user, plan_id, dto))
