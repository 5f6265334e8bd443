"""
Repositorio de cuentas de usuario y relaciones PT -> cliente.
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import TrainerClientModel, UserModel
from fitdash.shared.constants.status_constants import status_aliases


class UserRepository:
    """Repositorio para gestionar usuarios en la base de datos."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_by_id(self, user_id: str) -> Optional[UserModel]:
        result = await self.db.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()
    
    async def get_by_email(self, email: str) -> Optional[UserModel]:
        """Busqueda case-insensitive por email."""
        result = await self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
        )
        return result.scalars().first()
    
    async def get_by_ids(self, user_ids: Iterable[str]) -> List[UserModel]:
        ids = [user_id for user_id in set(user_ids) if user_id]
        if not ids:
            return []
        result = await self.db.execute(
            select(UserModel).where(UserModel.id.in_(ids))
        )
        return list(result.scalars().all())
    
    async def get_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """Mapa id -> nombre visible (nombre o, en su defecto, email)."""
        return {
            user.id: (user.name or user.email)
            for user in await self.get_by_ids(user_ids)
            if user.name or user.email
        }
    
    async def list_users(
        self,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 200
    ) -> List[UserModel]:
        """
        Lista usuarios con filtros opcionales.
        
        Args:
            role: Rol en formato BD (ADMIN, TRAINER, CLIENT)
            status: Estado canonico (PENDING, ACTIVE, SUSPENDED) o heredado
            search: Texto a buscar en nombre o email
            limit: Maximo de filas
        """
        query = select(UserModel)
        if role:
            query = query.where(UserModel.role == role)
        if status:
            # Incluye los valores heredados que se leen como ese estado
            query = query.where(func.upper(func.trim(UserModel.status)).in_(sorted(status_aliases(status))))
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.where(or_(
                func.lower(UserModel.email).like(pattern),
                func.lower(UserModel.name).like(pattern),
            ))
        query = query.order_by(UserModel.created_at.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def count_by_role_and_status(self) -> Dict[str, Dict[str, int]]:
        """Conteo {role: {status: n}} sobre todas las cuentas."""
        result = await self.db.execute(
            select(UserModel.role, UserModel.status, func.count(UserModel.id))
            .group_by(UserModel.role, UserModel.status)
        )
        counts: Dict[str, Dict[str, int]] = {}
        for role, status, total in result.all():
            counts.setdefault(role or "", {})[status or ""] = int(total)
        return counts
    
    async def create(
        self,
        email: str,
        name: Optional[str],
        role: str,
        password_hash: Optional[str],
        status: str = "PENDING",
        phone: Optional[str] = None
    ) -> UserModel:
        user = UserModel(
            email=email.strip().lower(),
            name=name,
            role=role,
            status=status,
            password_hash=password_hash,
            phone=phone,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        
        logger.info(f"Usuario creado: {user.id} ({user.email}) rol={role}")
        return user
    
    async def update_status(
        self,
        user: UserModel,
        status: str,
        actor_id: Optional[str] = None
    ) -> UserModel:
        """Cambia el estado y registra quien y cuando lo decidio."""
        user.status = status
        user.status_changed_at = datetime.now(timezone.utc)
        if actor_id:
            user.approved_by = actor_id
        await self.db.flush()
        await self.db.refresh(user)
        return user
    
    async def update_fields(self, user: UserModel, **fields) -> UserModel:
        """Actualiza los campos indicados (ignora los None)."""
        for key, value in fields.items():
            if value is not None:
                setattr(user, key, value)
        await self.db.flush()
        await self.db.refresh(user)
        return user
    
    async def touch_login(self, user: UserModel) -> None:
        user.last_login_at = datetime.now(timezone.utc)
        await self.db.flush()


class TrainerClientRepository:
    """Repositorio de la relacion PT -> cliente."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_client_ids(self, trainer_id: str) -> List[str]:
        result = await self.db.execute(
            select(TrainerClientModel.client_id)
            .where(TrainerClientModel.trainer_id == trainer_id)
        )
        return [row for row in result.scalars().all() if row]
    
    async def get_links(self, trainer_id: str) -> List[TrainerClientModel]:
        result = await self.db.execute(
            select(TrainerClientModel)
            .where(TrainerClientModel.trainer_id == trainer_id)
            .order_by(TrainerClientModel.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def get_trainer_ids(self, client_id: str) -> List[str]:
        result = await self.db.execute(
            select(TrainerClientModel.trainer_id)
            .where(TrainerClientModel.client_id == client_id)
        )
        return [row for row in result.scalars().all() if row]
    
    async def is_linked(self, trainer_id: str, client_id: str) -> bool:
        result = await self.db.execute(
            select(TrainerClientModel.id).where(
                TrainerClientModel.trainer_id == trainer_id,
                TrainerClientModel.client_id == client_id,
            )
        )
        return result.scalar_one_or_none() is not None
    
    async def link(self, trainer_id: str, client_id: str) -> TrainerClientModel:
        """Crea la relacion si no existe (idempotente)."""
        result = await self.db.execute(
            select(TrainerClientModel).where(
                TrainerClientModel.trainer_id == trainer_id,
                TrainerClientModel.client_id == client_id,
            )
        )
        existing = result.scalar_one_or_none()
        if existing:
            return existing
        link = TrainerClientModel(trainer_id=trainer_id, client_id=client_id)
        self.db.add(link)
        await self.db.flush()
        logger.info(f"Cliente {client_id} asociado al PT {trainer_id}")
        return link
