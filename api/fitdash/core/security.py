"""
Credenciales de la plataforma: contraseñas (bcrypt) y tokens de sesión (JWT).

El token de sesión lleva los claims de `SessionUser.to_claims()` más
`typ="session"`, `iat` y `exp`. Solo se aceptan tokens de tipo sesión.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from passlib.context import CryptContext

from fitdash.core.config import settings
from fitdash.shared.exceptions.auth import InvalidCredentialsException, TokenExpiredException


SESSION_TOKEN_TYPE = "session"

# Contexto para hashing de contraseñas
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class SecurityService:
    """Hashing de contraseñas y emision/lectura de tokens de sesion."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM
        self.ttl = timedelta(minutes=ttl_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Cuentas importadas sin contraseña (hash vacío) nunca validan,
        igual que los hashes con formato desconocido.
        """
        if not hashed_password:
            return False
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False

    def create_access_token(
        self,
        claims: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Emite el token de sesión.

        Args:
            claims: sub, email, name y role del usuario de la sesión
            expires_delta: Vigencia; por defecto ACCESS_TOKEN_EXPIRE_MINUTES
        """
        issued_at = datetime.now(timezone.utc)
        payload = {key: value for key, value in claims.items() if value is not None}
        payload.update({
            "typ": SESSION_TOKEN_TYPE,
            "iat": issued_at,
            "exp": issued_at + (expires_delta if expires_delta is not None else self.ttl),
        })
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """
        Valida firma, vigencia y tipo del token.

        Raises:
            TokenExpiredException: Token caducado
            InvalidCredentialsException: Firma inválida o token que no es de sesión
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTError:
            raise InvalidCredentialsException()
        if claims.get("typ") != SESSION_TOKEN_TYPE:
            raise InvalidCredentialsException()
        return claims


# Instancia global del servicio de seguridad
security_service = SecurityService()
