"""
Dependencias de autenticacion y autorizacion.

- get_session_user: usuario de la sesion o None (nunca falla)
- require_user: 401 si no hay sesion
- require_roles: 403 si el rol no esta permitido
- get_request_timezone: zona horaria de las cookies `tz` / `fp_tz`
"""
from datetime import tzinfo
from typing import Callable, Optional

from fastapi import Depends, Request

from fitdash.core.config import settings
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.security.session_resolver import SessionResolver, session_resolver
from fitdash.shared.constants.roles import Role
from fitdash.shared.exceptions.auth import ForbiddenException, UnauthenticatedException
from fitdash.shared.utils.datetime_utils import resolve_timezone


TIMEZONE_COOKIES = ("tz", "fp_tz")


def get_session_resolver() -> SessionResolver:
    return session_resolver


def get_session_user(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Optional[SessionUser]:
    return resolver.resolve(request)


def require_user(user: Optional[SessionUser] = Depends(get_session_user)) -> SessionUser:
    """
    Raises:
        UnauthenticatedException: Si la peticion no trae sesion
    """
    if user is None:
        raise UnauthenticatedException()
    return user


def require_roles(*roles: Role) -> Callable[..., SessionUser]:
    """
    Crea una dependencia que exige uno de los roles indicados.
    
    Uso:
        user: SessionUser = Depends(require_roles(Role.ADMIN))
    """
    allowed = frozenset(roles)
    
    def dependency(user: SessionUser = Depends(require_user)) -> SessionUser:
        if user.role not in allowed:
            raise ForbiddenException(
                details={"role": user.role.value, "allowed": sorted(role.value for role in allowed)}
            )
        return user
    
    return dependency


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.PT, Role.ADMIN)
require_client = require_roles(Role.CLIENT)


def get_request_timezone(request: Request) -> tzinfo:
    """Zona horaria del navegador (cookies `tz` o `fp_tz`); invalida -> por defecto."""
    for name in TIMEZONE_COOKIES:
        value = request.cookies.get(name)
        if value:
            return resolve_timezone(value, settings.DEFAULT_TIMEZONE)
    return resolve_timezone(settings.DEFAULT_TIMEZONE)
