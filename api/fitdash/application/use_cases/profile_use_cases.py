"""
Casos de uso del perfil, metricas antropometricas y notas internas.
"""
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.user_dto import (
    MeasurementCreateDTO,
    MeasurementDTO,
    NoteDTO,
    ProfileUpdateDTO,
    UserDTO,
)
from fitdash.application.use_cases.access_policy import ensure_client_access
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.repositories.measurement_repository import MeasurementRepository
from fitdash.infrastructure.repositories.note_repository import NoteRepository
from fitdash.infrastructure.repositories.user_repository import TrainerClientRepository, UserRepository
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import (
    EntityAlreadyExistsException,
    EntityNotFoundException,
    ValidationException,
)
from fitdash.shared.utils.datetime_utils import DateTimeUtils


def compute_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """IMC = peso / altura^2 (redondeado a 1 decimal)."""
    if not weight_kg or not height_cm:
        return None
    meters = height_cm / 100
    return round(weight_kg / (meters * meters), 1)


class ProfileUseCases:
    """
    Perfil del usuario de la sesion y datos de seguimiento de clientes.
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.links = TrainerClientRepository(db)
        self.measurements = MeasurementRepository(db)
        self.notes = NoteRepository(db)
    
    async def get_profile(self, viewer: SessionUser) -> UserDTO:
        user = await self.users.get_by_id(viewer.id)
        if not user:
            raise EntityNotFoundException("Usuario", viewer.id)
        return UserDTO.from_model(user)
    
    async def update_profile(self, viewer: SessionUser, dto: ProfileUpdateDTO) -> UserDTO:
        """
        Actualiza nombre, email y telefono. El rol y el estado no se tocan aqui.
        
        Raises:
            ValidationException: Email invalido
            EntityAlreadyExistsException: Email usado por otra cuenta
        """
        user = await self.users.get_by_id(viewer.id)
        if not user:
            raise EntityNotFoundException("Usuario", viewer.id)
        
        email = None
        if dto.email is not None:
            email = dto.email.strip().lower()
            if "@" not in email:
                raise ValidationException("Email invalido", field="email")
            owner = await self.users.get_by_email(email)
            if owner and owner.id != user.id:
                raise EntityAlreadyExistsException("Usuario", "email", email)
        
        name = dto.name.strip() if dto.name is not None else None
        phone = dto.phone.strip() if dto.phone is not None else None
        user = await self.users.update_fields(user, name=name, email=email, phone=phone)
        return UserDTO.from_model(user)
    
    async def list_metrics(self, viewer: SessionUser, user_id: Optional[str] = None) -> List[MeasurementDTO]:
        target = user_id or viewer.id
        await ensure_client_access(viewer, target, self.links)
        rows = await self.measurements.list_for_user(target)
        return [MeasurementDTO.model_validate(row) for row in rows]
    
    async def add_metric(
        self,
        viewer: SessionUser,
        dto: MeasurementCreateDTO,
        user_id: Optional[str] = None,
    ) -> MeasurementDTO:
        """
        Registra una medicion. Si llega la altura y no el IMC, se calcula.
        
        Raises:
            ValidationException: Si no se indica ninguna medida
        """
        target = user_id or viewer.id
        await ensure_client_access(viewer, target, self.links)
        if dto.weight_kg is None and dto.body_fat_pct is None and dto.bmi is None:
            raise ValidationException("Indica al menos una medida", field="weight_kg")
        
        row = await self.measurements.create(
            user_id=target,
            measured_at=dto.measured_at or DateTimeUtils.now_utc(),
            weight_kg=dto.weight_kg,
            body_fat_pct=dto.body_fat_pct,
            bmi=dto.bmi if dto.bmi is not None else compute_bmi(dto.weight_kg, dto.height_cm),
            notes=dto.notes,
            created_by=viewer.id,
        )
        return MeasurementDTO.model_validate(row)
    
    async def list_notes(self, viewer: SessionUser, user_id: str) -> List[NoteDTO]:
        """Notas internas sobre un usuario (solo staff)."""
        await self._ensure_staff_access(viewer, user_id)
        rows = await self.notes.list_for_user(user_id)
        return [NoteDTO.model_validate(row) for row in rows]
    
    async def add_note(self, viewer: SessionUser, user_id: str, body: str) -> NoteDTO:
        await self._ensure_staff_access(viewer, user_id)
        body = body.strip()
        if not body:
            raise ValidationException("La nota no puede estar vacía", field="body")
        if not await self.users.get_by_id(user_id):
            raise EntityNotFoundException("Usuario", user_id)
        row = await self.notes.create(user_id, body, viewer.id)
        return NoteDTO.model_validate(row)
    
    async def _ensure_staff_access(self, viewer: SessionUser, user_id: str) -> None:
        if viewer.is_client:
            raise ForbiddenException("Solo el equipo puede gestionar notas")
        await ensure_client_access(viewer, user_id, self.links)
