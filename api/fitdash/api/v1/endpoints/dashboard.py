"""
Endpoints de dashboards.

Todos responden 200 aunque falle la base de datos: en ese caso devuelven
el dashboard vacio con `source="fallback"`.
"""
from datetime import tzinfo
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fitdash.api.v1.dependencies.auth_deps import (
    get_request_timezone,
    require_admin,
    require_staff,
    require_user,
)
from fitdash.api.v1.dependencies.use_case_deps import get_dashboard_use_cases
from fitdash.application.dto.admin_dashboard_dto import AdminDashboardDTO
from fitdash.application.dto.client_dashboard_dto import ClientDashboardDTO
from fitdash.application.dto.messages_dashboard_dto import MessagesDashboardDTO
from fitdash.application.dto.system_health_dto import SystemHealthDashboardDTO
from fitdash.application.dto.trainer_dashboard_dto import TrainerCountsDTO, TrainerDashboardDTO
from fitdash.application.use_cases.dashboard_use_cases import DashboardUseCases
from fitdash.domain.entities.session_user import SessionUser
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import ValidationException


router = APIRouter(prefix="/dashboard", tags=["Dashboards"])
trainer_router = APIRouter(prefix="/trainer", tags=["Dashboards"])


@router.get("/client", response_model=ClientDashboardDTO)
async def client_dashboard(
    range_days: int = Query(30, ge=1, le=365),
    client_id: Optional[str] = Query(None, description="Solo admin"),
    user: SessionUser = Depends(require_user),
    tz: tzinfo = Depends(get_request_timezone),
    use_cases: DashboardUseCases = Depends(get_dashboard_use_cases),
):
    """
    Dashboard del cliente de la sesion. Un ADMIN puede consultar el de
    cualquier cliente con `client_id`.
    """
    if user.is_admin:
        if not client_id:
            raise ValidationException("Indica el client_id", field="client_id")
        target = client_id
    elif user.is_client:
        target = user.id
    else:
        raise ForbiddenException()
    return await use_cases.load_client_dashboard(target, range_days=range_days, tz=tz)


@router.get("/trainer", response_model=TrainerDashboardDTO)
async def trainer_dashboard(
    user: SessionUser = Depends(require_staff),
    tz: tzinfo = Depends(get_request_timezone),
    use_cases: DashboardUseCases = Depends(get_dashboard_use_cases),
):
    return await use_cases.load_trainer_dashboard(user, tz=tz)


@router.get("/admin", response_model=AdminDashboardDTO)
async def admin_dashboard(
    user: SessionUser = Depends(require_admin),
    tz: tzinfo = Depends(get_request_timezone),
    use_cases: DashboardUseCases = Depends(get_dashboard_use_cases),
):
    return await use_cases.load_admin_dashboard(tz=tz)


@router.get("/messages", response_model=MessagesDashboardDTO)
async def messages_dashboard(
    range_days: Optional[str] = Query(None, description="Entre 7 y 90 dias"),
    user: SessionUser = Depends(require_user),
    tz: tzinfo = Depends(get_request_timezone),
    use_cases: DashboardUseCases = Depends(get_dashboard_use_cases),
):
    return await use_cases.load_messages_dashboard(user, range_days=range_days, tz=tz)


@router.get("/system-health", response_model=SystemHealthDashboardDTO)
async def system_health_dashboard(
    user: SessionUser = Depends(require_admin),
    use_cases: DashboardUseCases = Depends(get_dashboard_use_cases),
):
    return await use_cases.load_system_health_dashboard()


@trainer_router.get("/counts", response_model=TrainerCountsDTO)
async def trainer_counts(
    user: SessionUser = Depends(require_staff),
    use_cases: DashboardUseCases = Depends(get_dashboard_use_cases),
):
    """Contadores de la barra lateral del PT."""
    return await use_cases.load_trainer_counts(user)
