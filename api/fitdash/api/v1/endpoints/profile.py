"""
Endpoints de perfil, metricas y notas internas.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from fitdash.api.v1.dependencies.auth_deps import require_staff, require_user
from fitdash.api.v1.dependencies.use_case_deps import get_profile_use_cases
from fitdash.application.dto.user_dto import (
    MeasurementCreateDTO,
    MeasurementDTO,
    MeasurementListDTO,
    NoteCreateDTO,
    NoteDTO,
    NoteListDTO,
    ProfileUpdateDTO,
    UserResponseDTO,
)
from fitdash.application.use_cases.profile_use_cases import ProfileUseCases
from fitdash.domain.entities.session_user import SessionUser


router = APIRouter(prefix="/profile", tags=["Profile"])
notes_router = APIRouter(prefix="/users", tags=["Notes"])


@router.get("", response_model=UserResponseDTO)
async def get_profile(
    user: SessionUser = Depends(require_user),
    use_cases: ProfileUseCases = Depends(get_profile_use_cases),
):
    return UserResponseDTO(user=await use_cases.get_profile(user))


@router.patch("", response_model=UserResponseDTO)
async def update_profile(
    dto: ProfileUpdateDTO,
    user: SessionUser = Depends(require_user),
    use_cases: ProfileUseCases = Depends(get_profile_use_cases),
):
    return UserResponseDTO(user=await use_cases.update_profile(user, dto))


@router.get("/metrics", response_model=MeasurementListDTO)
async def list_metrics(
    user_id: Optional[str] = Query(None, description="Cliente a consultar (PT/ADMIN)"),
    user: SessionUser = Depends(require_user),
    use_cases: ProfileUseCases = Depends(get_profile_use_cases),
):
    return MeasurementListDTO(metrics=await use_cases.list_metrics(user, user_id))


@router.post("/metrics", response_model=MeasurementDTO, status_code=status.HTTP_201_CREATED)
async def add_metric(
    dto: MeasurementCreateDTO,
    user_id: Optional[str] = Query(None, description="Cliente a medir (PT/ADMIN)"),
    user: SessionUser = Depends(require_user),
    use_cases: ProfileUseCases = Depends(get_profile_use_cases),
):
    return await use_cases.add_metric(user, dto, user_id)


@notes_router.get("/{user_id}/notes", response_model=NoteListDTO)
async def list_notes(
    user_id: str,
    user: SessionUser = Depends(require_staff),
    use_cases: ProfileUseCases = Depends(get_profile_use_cases),
):
    return NoteListDTO(notes=await use_cases.list_notes(user, user_id))


@notes_router.post("/{user_id}/notes", response_model=NoteDTO, status_code=status.HTTP_201_CREATED)
async def add_note(
    user_id: str,
    dto: NoteCreateDTO,
    user: SessionUser = Depends(require_staff),
    use_cases: ProfileUseCases = Depends(get_profile_use_cases),
):
    return await use_cases.add_note(user, user_id, dto.body)
