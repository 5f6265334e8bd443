"""
Resolucion de la sesion de la peticion.

Dos proveedores de identidad, en este orden:
1. Token JWT (cabecera `Authorization: Bearer` o cookie de sesion).
2. Cookies del login demo heredado (`role`, `uid`, `email`), solo si
   LEGACY_ROLE_COOKIE_ENABLED esta activo.

`resolve` nunca lanza: cualquier fallo de un proveedor equivale a
"sin sesion".
"""
from typing import Mapping, Optional

from fastapi import Request
from loguru import logger

from fitdash.core.config import settings
from fitdash.core.security import SecurityService, security_service
from fitdash.domain.entities.session_user import SessionUser
from fitdash.shared.constants.roles import normalize_role
from fitdash.shared.exceptions.auth import AuthException


LEGACY_ROLE_COOKIE = "role"
LEGACY_UID_COOKIE = "uid"
LEGACY_EMAIL_COOKIE = "email"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer abc' -> 'abc'. Cualquier otro esquema devuelve None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SessionResolver:
    """
    Reconstruye el SessionUser a partir de cabeceras y cookies.
    """
    
    def __init__(
        self,
        security: SecurityService = security_service,
        cookie_name: Optional[str] = None,
        legacy_enabled: Optional[bool] = None,
    ):
        self.security = security
        self.cookie_name = cookie_name or settings.SESSION_COOKIE_NAME
        self.legacy_enabled = (
            settings.LEGACY_ROLE_COOKIE_ENABLED if legacy_enabled is None else legacy_enabled
        )
    
    def resolve(self, request: Request) -> Optional[SessionUser]:
        """Devuelve el usuario de la sesion o None."""
        return self.resolve_from(request.headers, request.cookies)
    
    def resolve_from(
        self,
        headers: Mapping[str, str],
        cookies: Mapping[str, str],
    ) -> Optional[SessionUser]:
        token = extract_bearer_token(headers.get("authorization")) or cookies.get(self.cookie_name)
        if token:
            user = self._from_token(token)
            if user is not None:
                return user
        if self.legacy_enabled:
            return self._from_legacy_cookies(cookies)
        return None
    
    def _from_token(self, token: str) -> Optional[SessionUser]:
        try:
            claims = self.security.decode_access_token(token)
        except AuthException as exc:
            logger.debug(f"Token de sesion descartado: {exc.error_code}")
            return None
        except Exception as exc:
            logger.warning(f"Fallo inesperado al leer el token de sesion: {exc}")
            return None

        user_id = claims.get("sub")
        role = normalize_role(claims.get("role"))
        if not user_id or role is None:
            logger.debug("Token sin sub o con rol no reconocido")
            return None
        return SessionUser(
            id=str(user_id),
            role=role,
            email=claims.get("email") or None,
            name=claims.get("name") or None,
        )
    
    def _from_legacy_cookies(self, cookies: Mapping[str, str]) -> Optional[SessionUser]:
        role = normalize_role(cookies.get(LEGACY_ROLE_COOKIE))
        if role is None:
            return None
        uid = (cookies.get(LEGACY_UID_COOKIE) or "").strip() or f"demo-{role.value.lower()}"
        email = (cookies.get(LEGACY_EMAIL_COOKIE) or "").strip() or None
        return SessionUser(id=uid, role=role, email=email)


# Instancia global del resolver
session_resolver = SessionResolver()
