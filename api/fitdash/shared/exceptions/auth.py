"""
Excepciones relacionadas con autenticación y autorización.
"""
from typing import Dict, Optional

from fitdash.shared.exceptions.base import AppException


class AuthException(AppException):
    """Excepción base para errores de autenticación."""
    
    def __init__(self, message: str, error_code: str = "AUTH_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details
        )


class UnauthenticatedException(AuthException):
    """Excepción cuando la petición no trae una sesión válida."""
    
    def __init__(self, message: str = "Sesión no iniciada"):
        super().__init__(
            message=message,
            error_code="UNAUTHENTICATED"
        )


class InvalidCredentialsException(AuthException):
    """Excepción para credenciales inválidas."""
    
    def __init__(self):
        super().__init__(
            message="Credenciales inválidas",
            error_code="INVALID_CREDENTIALS"
        )


class TokenExpiredException(AuthException):
    """Excepción para token expirado."""
    
    def __init__(self):
        super().__init__(
            message="La sesión ha expirado",
            error_code="TOKEN_EXPIRED"
        )


class ForbiddenException(AppException):
    """Excepción para acceso prohibido."""
    
    def __init__(self, message: str = "Acceso prohibido", details=None):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN",
            details=details
        )


class AccountNotActiveException(ForbiddenException):
    """La cuenta existe pero no está activa (pendiente o suspendida)."""
    
    def __init__(self, status: str):
        super().__init__(
            message=f"La cuenta no está activa (estado: {status})",
            details={"status": status}
        )
        self.error_code = "ACCOUNT_NOT_ACTIVE"


class RateLimitedException(AppException):
    """Excepción cuando se supera el límite de peticiones."""
    
    def __init__(self, retry_after: int, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            message="Demasiados intentos. Inténtalo más tarde.",
            status_code=429,
            error_code="RATE_LIMITED",
            details={"retry_after": retry_after}
        )
        self.headers = headers or {"retry-after": str(retry_after)}
