"""
Casos de uso de autenticacion.

- login con email (o id) + contraseña, limitado por IP
- alta de cuentas (quedan PENDING hasta la aprobacion de un admin)
"""
from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.auth_dto import RegisterRequestDTO
from fitdash.application.dto.user_dto import UserDTO
from fitdash.core.config import settings
from fitdash.core.security import SecurityService, security_service
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.repositories.audit_log_repository import AuditLogRepository
from fitdash.infrastructure.repositories.user_repository import UserRepository
from fitdash.shared.constants.roles import Role, normalize_role, to_db_role
from fitdash.shared.constants.status_constants import UserStatus, to_status
from fitdash.shared.exceptions.auth import (
    AccountNotActiveException,
    InvalidCredentialsException,
    RateLimitedException,
)
from fitdash.shared.exceptions.domain import EntityAlreadyExistsException, ValidationException
from fitdash.shared.utils.audit_logger import AuditKind
from fitdash.shared.utils.rate_limit import RateLimiter, RateLimitInfo


# Limite de intentos de login por IP (ventana de 1 minuto)
login_rate_limiter = RateLimiter(
    limit=settings.RATE_LIMIT_PER_MINUTE,
    window_seconds=60,
    prefix="login",
)

_SELF_SERVICE_ROLES = {Role.CLIENT, Role.PT}


class AuthUseCases:
    """
    Casos de uso de login y registro.
    """
    
    def __init__(
        self,
        db: AsyncSession,
        limiter: RateLimiter = login_rate_limiter,
        security: SecurityService = security_service,
    ):
        self.db = db
        self.users = UserRepository(db)
        self.audit = AuditLogRepository(db)
        self.limiter = limiter
        self.security = security
        # Estado del bucket tras el ultimo intento de login
        self.rate_limit: Optional[RateLimitInfo] = None
    
    async def login(self, identifier: str, password: str, fingerprint: str) -> Tuple[SessionUser, str]:
        """
        Valida las credenciales y emite el token de sesion.
        
        Returns:
            Tuple[SessionUser, str]: Usuario de la sesion y token JWT
            
        Raises:
            RateLimitedException: Demasiados intentos desde la misma IP
            InvalidCredentialsException: Usuario inexistente o contraseña incorrecta
            AccountNotActiveException: Cuenta PENDING o SUSPENDED
        """
        attempt = self.limiter.hit(fingerprint)
        self.rate_limit = attempt
        if not attempt.ok:
            logger.warning(f"Login bloqueado por rate limit: {fingerprint}")
            raise RateLimitedException(attempt.retry_after(), headers=attempt.headers())
        
        identifier = identifier.strip()
        if "@" in identifier:
            user = await self.users.get_by_email(identifier)
        else:
            user = await self.users.get_by_id(identifier)
        
        if not user or not self.security.verify_password(password, user.password_hash):
            logger.info(f"Login fallido para '{identifier}'")
            raise InvalidCredentialsException()
        
        status = to_status(user.status)
        if status is not UserStatus.ACTIVE:
            raise AccountNotActiveException(status.value)
        
        role = normalize_role(user.role)
        if role is None:
            logger.warning(f"Usuario {user.id} con rol no reconocido: {user.role!r}")
            raise InvalidCredentialsException()
        
        await self.users.touch_login(user)
        session_user = SessionUser(id=user.id, role=role, email=user.email, name=user.name)
        token = self.security.create_access_token(session_user.to_claims())
        await self.audit.record(AuditKind.LOGIN, user.id, "user", user.id, "Inicio de sesion")
        
        logger.info(f"Login correcto: {user.id} ({role.value})")
        return session_user, token
    
    async def register(self, dto: RegisterRequestDTO) -> UserDTO:
        """
        Crea una cuenta PENDING de cliente (o una solicitud de PT).
        
        Raises:
            ValidationException: Email invalido o rol no permitido
            EntityAlreadyExistsException: Email ya registrado
        """
        email = dto.email.strip().lower()
        if "@" not in email:
            raise ValidationException("Email invalido", field="email")
        
        role = normalize_role(dto.role or Role.CLIENT.value)
        if role not in _SELF_SERVICE_ROLES:
            raise ValidationException("Rol no permitido en el registro", field="role")
        
        if await self.users.get_by_email(email):
            raise EntityAlreadyExistsException("Usuario", "email", email)
        
        user = await self.users.create(
            email=email,
            name=(dto.name or "").strip() or None,
            role=to_db_role(role),
            password_hash=self.security.hash_password(dto.password),
            status=UserStatus.PENDING.value,
            phone=dto.phone,
        )
        return UserDTO.from_model(user)
