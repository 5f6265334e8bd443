"""
Endpoints de agenda: sesiones, exportacion .ics y pedidos de sesion.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from fitdash.api.v1.dependencies.auth_deps import require_client, require_staff, require_user
from fitdash.api.v1.dependencies.use_case_deps import get_session_use_cases
from fitdash.application.dto.session_dto import (
    SessionCreateDTO,
    SessionListDTO,
    SessionRequestCreateDTO,
    SessionRequestDecisionDTO,
    SessionRequestListDTO,
    SessionRequestResponseDTO,
    SessionResponseDTO,
    SessionUpdateDTO,
)
from fitdash.application.use_cases.session_use_cases import SessionUseCases
from fitdash.domain.entities.session_user import SessionUser


router = APIRouter(prefix="/sessions", tags=["Sessions"])
requests_router = APIRouter(prefix="/session-requests", tags=["Sessions"])


@router.get("", response_model=SessionListDTO)
async def list_sessions(
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    user: SessionUser = Depends(require_user),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    return SessionListDTO(sessions=await use_cases.list_sessions(user, start, end))


@router.post("", response_model=SessionResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_session(
    dto: SessionCreateDTO,
    user: SessionUser = Depends(require_staff),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    return SessionResponseDTO(session=await use_cases.create_session(user, dto))


@router.patch("/{session_id}", response_model=SessionResponseDTO)
async def update_session(
    session_id: str,
    dto: SessionUpdateDTO,
    user: SessionUser = Depends(require_user),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    return SessionResponseDTO(session=await use_cases.update_session(user, session_id, dto))


@router.get("/{session_id}/ics", response_class=Response)
async def export_session_ics(
    session_id: str,
    user: SessionUser = Depends(require_user),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    """Descarga la sesion como evento de calendario."""
    filename, content = await use_cases.export_ics(user, session_id)
    return Response(
        content=content,
        media_type="text/calendar; charset=utf-8",
        headers={"content-disposition": f'attachment; filename="{filename}"'},
    )


@requests_router.get("", response_model=SessionRequestListDTO)
async def list_session_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    user: SessionUser = Depends(require_user),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    return SessionRequestListDTO(requests=await use_cases.list_requests(user, status_filter))


@requests_router.post("", response_model=SessionRequestResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_session_request(
    dto: SessionRequestCreateDTO,
    user: SessionUser = Depends(require_client),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    return SessionRequestResponseDTO(request=await use_cases.create_request(user, dto))


@requests_router.patch("/{request_id}", response_model=SessionRequestResponseDTO)
async def decide_session_request(
    request_id: str,
    dto: SessionRequestDecisionDTO,
    user: SessionUser = Depends(require_staff),
    use_cases: SessionUseCases = Depends(get_session_use_cases),
):
    """Aprueba o rechaza un pedido (PT destinatario o ADMIN)."""
    request, session = await use_cases.decide_request(user, request_id, dto.status)
    return SessionRequestResponseDTO(request=request, session=session)
