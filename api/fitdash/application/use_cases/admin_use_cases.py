"""
Casos de uso de administracion de cuentas.

Todas las acciones quedan en el registro de auditoria.
"""
from typing import List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.user_dto import UserDTO
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.repositories.audit_log_repository import AuditLogRepository
from fitdash.infrastructure.repositories.notification_repository import NotificationRepository
from fitdash.infrastructure.repositories.user_repository import UserRepository
from fitdash.shared.constants.roles import to_db_role
from fitdash.shared.constants.status_constants import UserStatus, to_status
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException
from fitdash.shared.utils.audit_logger import AuditKind


_STATUS_NOTICE = {
    UserStatus.ACTIVE: ("Cuenta aprobada", "Tu cuenta ya está activa."),
    UserStatus.SUSPENDED: ("Cuenta suspendida", "Tu cuenta ha sido suspendida. Contacta con el equipo."),
    UserStatus.PENDING: ("Cuenta en revisión", "Tu cuenta vuelve a estar pendiente de revisión."),
}


class AdminUseCases:
    """
    Gestion de usuarios y notificaciones masivas.
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.notifications = NotificationRepository(db)
        self.audit = AuditLogRepository(db)
    
    async def list_users(
        self,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[UserDTO]:
        """
        Lista usuarios. Los filtros aceptan sinonimos de rol y estados heredados.
        
        Raises:
            ValidationException: Rol o estado no reconocido
        """
        db_role = None
        if role:
            db_role = to_db_role(role)
            if db_role is None:
                raise ValidationException(f"Rol no reconocido: {role}", field="role")
        db_status = None
        if status:
            parsed = to_status(status, fallback=None)
            if parsed is None:
                raise ValidationException(f"Estado no reconocido: {status}", field="status")
            db_status = parsed.value
        rows = await self.users.list_users(role=db_role, status=db_status, search=search)
        return [UserDTO.from_model(row) for row in rows]
    
    async def approve_user(
        self,
        actor: SessionUser,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserDTO:
        """
        Activa una cuenta identificada por id o email.
        
        Raises:
            ValidationException: Si no se indica ni id ni email
            EntityNotFoundException: Si la cuenta no existe
        """
        user_id = (user_id or "").strip()
        email = (email or "").strip()
        if not user_id and not email:
            raise ValidationException("Indica el id o el email de la cuenta", field="id")
        
        user = await self.users.get_by_id(user_id) if user_id else await self.users.get_by_email(email)
        if not user:
            raise EntityNotFoundException("Usuario", user_id or email)
        
        updated = await self._apply_status(actor, user, UserStatus.ACTIVE, AuditKind.USER_APPROVE)
        return updated
    
    async def set_status(self, actor: SessionUser, user_id: str, raw_status: str) -> UserDTO:
        """
        Cambia el estado de una cuenta (acepta valores heredados).
        
        Raises:
            ValidationException: Estado no reconocido
            EntityNotFoundException: Si la cuenta no existe
        """
        status = to_status(raw_status, fallback=None)
        if status is None:
            raise ValidationException(f"Estado no reconocido: {raw_status}", field="status")
        user = await self.users.get_by_id(user_id)
        if not user:
            raise EntityNotFoundException("Usuario", user_id)
        return await self._apply_status(actor, user, status, AuditKind.USER_STATUS_CHANGE)
    
    async def _apply_status(self, actor: SessionUser, user, status: UserStatus, kind: str) -> UserDTO:
        previous = to_status(user.status)
        user = await self.users.update_status(user, status.value, actor.id)
        await self.audit.record(
            kind,
            actor.id,
            "user",
            user.id,
            f"Estado de cuenta {previous.value} -> {status.value}",
            {"email": user.email, "from": previous.value, "to": status.value},
        )
        if previous is not status:
            title, body = _STATUS_NOTICE[status]
            await self.notifications.create_many([user.id], title, body, "account")
        logger.info(f"Cuenta {user.id} {previous.value} -> {status.value} por {actor.id}")
        return UserDTO.from_model(user)
    
    async def broadcast(
        self,
        actor: SessionUser,
        title: str,
        body: Optional[str] = None,
        user_id: Optional[str] = None,
        role: Optional[str] = None,
        type: Optional[str] = "broadcast",
    ) -> int:
        """
        Envia una notificacion a un usuario, a todas las cuentas activas de
        un rol o a todas las cuentas activas.
        
        Returns:
            int: Numero de notificaciones creadas
        """
        title = title.strip()
        if not title:
            raise ValidationException("El titulo es obligatorio", field="title")
        
        if user_id:
            user = await self.users.get_by_id(user_id)
            if not user:
                raise EntityNotFoundException("Usuario", user_id)
            targets = [user.id]
        else:
            db_role = None
            if role:
                db_role = to_db_role(role)
                if db_role is None:
                    raise ValidationException(f"Rol no reconocido: {role}", field="role")
            rows = await self.users.list_users(role=db_role, status=UserStatus.ACTIVE.value, limit=10000)
            targets = [row.id for row in rows]
        
        sent = await self.notifications.create_many(targets, title, body, type or "broadcast")
        await self.audit.record(
            AuditKind.NOTIFICATION_BROADCAST,
            actor.id,
            "notification",
            user_id,
            f"Notificacion enviada a {sent} usuarios",
            {"title": title, "role": role, "user_id": user_id, "sent": sent},
        )
        return sent
