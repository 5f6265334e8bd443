"""
Endpoints de administracion (solo ADMIN).

A diferencia de los dashboards, los errores de almacenamiento se
propagan como 500 UPSTREAM_FAILURE.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fitdash.api.v1.dependencies.auth_deps import require_admin
from fitdash.api.v1.dependencies.use_case_deps import get_admin_use_cases
from fitdash.application.dto.common_dto import OkDTO
from fitdash.application.dto.user_dto import (
    ApproveUserRequestDTO,
    BroadcastRequestDTO,
    UserListDTO,
    UserResponseDTO,
    UserStatusUpdateDTO,
)
from fitdash.application.use_cases.admin_use_cases import AdminUseCases
from fitdash.domain.entities.session_user import SessionUser


router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=UserListDTO)
async def list_users(
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    admin: SessionUser = Depends(require_admin),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    return UserListDTO(users=await use_cases.list_users(role=role, status=status, search=search))


@router.post("/users/approve", response_model=UserResponseDTO)
async def approve_user(
    dto: ApproveUserRequestDTO,
    admin: SessionUser = Depends(require_admin),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Activa una cuenta por `id` o `email` (400 si no llega ninguno)."""
    return UserResponseDTO(user=await use_cases.approve_user(admin, user_id=dto.id, email=dto.email))


@router.patch("/users/{user_id}/status", response_model=UserResponseDTO)
async def update_user_status(
    user_id: str,
    dto: UserStatusUpdateDTO,
    admin: SessionUser = Depends(require_admin),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    return UserResponseDTO(user=await use_cases.set_status(admin, user_id, dto.status))


@router.post("/notifications", response_model=OkDTO)
async def broadcast_notification(
    dto: BroadcastRequestDTO,
    admin: SessionUser = Depends(require_admin),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Notificacion a un usuario, a un rol o a todas las cuentas activas."""
    sent = await use_cases.broadcast(
        admin, dto.title, body=dto.body, user_id=dto.user_id, role=dto.role, type=dto.type,
    )
    return OkDTO(count=sent)
