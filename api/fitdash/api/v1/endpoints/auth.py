"""
Endpoints de autenticacion.

El token de sesion se devuelve en el cuerpo y en la cookie `fp_session`;
el resolver acepta cualquiera de los dos.
"""
from fastapi import APIRouter, Depends, Request, Response, status

from fitdash.api.v1.dependencies.auth_deps import require_user
from fitdash.api.v1.dependencies.use_case_deps import get_auth_use_cases
from fitdash.application.dto.auth_dto import (
    LoginRequestDTO,
    LoginResponseDTO,
    MeResponseDTO,
    RegisterRequestDTO,
    SessionUserDTO,
)
from fitdash.application.dto.common_dto import OkDTO
from fitdash.application.dto.user_dto import UserResponseDTO
from fitdash.application.use_cases.auth_use_cases import AuthUseCases
from fitdash.core.config import settings
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.security.session_resolver import (
    LEGACY_EMAIL_COOKIE,
    LEGACY_ROLE_COOKIE,
    LEGACY_UID_COOKIE,
)
from fitdash.shared.constants.roles import has_billing_access
from fitdash.shared.utils.rate_limit import get_request_fingerprint


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponseDTO, summary="Iniciar sesion")
async def login(
    dto: LoginRequestDTO,
    request: Request,
    response: Response,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
) -> LoginResponseDTO:
    user, token = await use_cases.login(dto.identifier, dto.password, get_request_fingerprint(request))
    if use_cases.rate_limit is not None:
        response.headers.update(use_cases.rate_limit.headers())
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return LoginResponseDTO(user=SessionUserDTO(**user.to_dict()), access_token=token)


@router.post("/logout", response_model=OkDTO, summary="Cerrar sesion")
async def logout(response: Response) -> OkDTO:
    for name in (settings.SESSION_COOKIE_NAME, LEGACY_ROLE_COOKIE, LEGACY_UID_COOKIE, LEGACY_EMAIL_COOKIE):
        response.delete_cookie(name, path="/")
    return OkDTO()


@router.get("/me", response_model=MeResponseDTO, summary="Usuario de la sesion")
async def me(user: SessionUser = Depends(require_user)) -> MeResponseDTO:
    return MeResponseDTO(user=SessionUserDTO(**user.to_dict()), billing_access=has_billing_access(user))


@router.post(
    "/register",
    response_model=UserResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Solicitar una cuenta",
)
async def register(
    dto: RegisterRequestDTO,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
) -> UserResponseDTO:
    """
    Crea una cuenta PENDING. No inicia sesion: la cuenta debe ser
    aprobada por un admin.
    """
    return UserResponseDTO(user=await use_cases.register(dto))
