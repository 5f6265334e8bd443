"""
Casos de uso de agenda: sesiones de entreno, exportacion a calendario y
pedidos de sesion / reagendamiento de los clientes.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.session_dto import (
    SessionCreateDTO,
    SessionRequestCreateDTO,
    SessionRequestDTO,
    SessionUpdateDTO,
    TrainingSessionDTO,
)
from fitdash.application.services.ics_builder import build_session_ics
from fitdash.domain.entities.dashboard_sources import SessionRecord
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database.models import TrainingSessionModel
from fitdash.infrastructure.repositories.audit_log_repository import AuditLogRepository
from fitdash.infrastructure.repositories.notification_repository import NotificationRepository
from fitdash.infrastructure.repositories.session_request_repository import SessionRequestRepository
from fitdash.infrastructure.repositories.training_session_repository import TrainingSessionRepository
from fitdash.infrastructure.repositories.user_repository import TrainerClientRepository, UserRepository
from fitdash.shared.constants.roles import Role, normalize_role
from fitdash.shared.constants.status_constants import ApprovalStatus, to_approval_status
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException
from fitdash.shared.utils.audit_logger import AuditKind
from fitdash.shared.utils.datetime_utils import DateTimeUtils


# Campos que un cliente puede tocar en sus sesiones
CLIENT_EDITABLE_FIELDS = {"client_attendance_status"}


class SessionUseCases:
    """
    Agenda de sesiones por rol.
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.sessions = TrainingSessionRepository(db)
        self.requests = SessionRequestRepository(db)
        self.users = UserRepository(db)
        self.links = TrainerClientRepository(db)
        self.notifications = NotificationRepository(db)
        self.audit = AuditLogRepository(db)
    
    # Sesiones
    
    async def list_sessions(
        self,
        viewer: SessionUser,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TrainingSessionDTO]:
        if start and end and end < start:
            raise ValidationException("'to' es anterior a 'from'", field="to")
        if viewer.is_admin:
            rows = await self.sessions.list_between(start, end)
        else:
            rows = await self.sessions.list_for_participant(viewer.id, start, end)
        return [TrainingSessionDTO.model_validate(row) for row in rows]
    
    async def create_session(self, viewer: SessionUser, dto: SessionCreateDTO) -> TrainingSessionDTO:
        """
        Agenda una sesion con un cliente.

        El PT solo agenda con sus clientes vinculados. El admin puede indicar
        cualquier PT y, si aun no estaban vinculados, crea el vinculo.

        Raises:
            ValidationException: PT sin indicar o destinatario que no es cliente
            EntityNotFoundException: Cliente o PT inexistente
            ForbiddenException: El cliente no esta vinculado al PT
        """
        trainer_id = dto.trainer_id if viewer.is_admin else viewer.id
        if not trainer_id:
            raise ValidationException("Indica el PT de la sesion", field="trainer_id")
        client = await self.users.get_by_id(dto.client_id)
        if not client:
            raise EntityNotFoundException("Cliente", dto.client_id)
        if normalize_role(client.role) is not Role.CLIENT:
            raise ValidationException("Solo se agendan sesiones con clientes", field="client_id")

        if viewer.is_admin:
            trainer = await self.users.get_by_id(trainer_id)
            if not trainer:
                raise EntityNotFoundException("PT", trainer_id)
            if normalize_role(trainer.role) is not Role.PT:
                raise ValidationException("El usuario indicado no es PT", field="trainer_id")
            await self.links.link(trainer_id, dto.client_id)
        elif not await self.links.is_linked(trainer_id, dto.client_id):
            raise ForbiddenException("El cliente no está vinculado a este PT")

        session = await self.sessions.create(
            trainer_id=trainer_id,
            client_id=dto.client_id,
            scheduled_at=DateTimeUtils.ensure_aware(dto.scheduled_at),
            duration_min=dto.duration_min,
            location=dto.location,
            notes=dto.notes,
            status="scheduled",
        )
        await self.notifications.create_many(
            [dto.client_id],
            "Nueva sesión agendada",
            f"Sesión el {DateTimeUtils.long_date_label(session.scheduled_at)} a las {DateTimeUtils.time_label(session.scheduled_at)}",
            "session",
        )
        return TrainingSessionDTO.model_validate(session)
    
    async def update_session(
        self,
        viewer: SessionUser,
        session_id: str,
        dto: SessionUpdateDTO,
    ) -> TrainingSessionDTO:
        """
        Edita una sesion. El cliente solo puede marcar su asistencia.
        """
        session = await self._get_visible(viewer, session_id)
        changes = dto.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationException("No hay cambios que aplicar")
        if viewer.is_client and set(changes) - CLIENT_EDITABLE_FIELDS:
            raise ForbiddenException("El cliente solo puede actualizar su asistencia")
        if changes.get("scheduled_at"):
            changes["scheduled_at"] = DateTimeUtils.ensure_aware(changes["scheduled_at"])
        for key in ("status", "client_attendance_status"):
            if changes.get(key):
                changes[key] = changes[key].strip().lower()
        
        session = await self.sessions.update(session, changes)
        logger.info(f"Sesion {session.id} actualizada por {viewer.id}: {sorted(changes)}")
        return TrainingSessionDTO.model_validate(session)
    
    async def export_ics(self, viewer: SessionUser, session_id: str) -> Tuple[str, str]:
        """
        Exporta la sesion a iCalendar.
        
        Returns:
            Tuple[str, str]: (nombre de fichero, contenido .ics)
        """
        session = await self._get_visible(viewer, session_id)
        if session.scheduled_at is None:
            raise ValidationException("La sesión no tiene fecha", field="scheduled_at")
        
        trainer = await self.users.get_by_id(session.trainer_id) if session.trainer_id else None
        client = await self.users.get_by_id(session.client_id) if session.client_id else None
        record = SessionRecord(
            id=session.id,
            trainer_id=session.trainer_id,
            client_id=session.client_id,
            scheduled_at=session.scheduled_at,
            duration_min=session.duration_min,
            location=session.location,
            status=session.status,
        )
        content = build_session_ics(
            record,
            trainer_name=(trainer.name or trainer.email) if trainer else None,
            trainer_email=trainer.email if trainer else None,
            client_name=(client.name or client.email) if client else None,
            notes=session.notes,
        )
        return f"sesion-{session.id}.ics", content
    
    async def _get_visible(self, viewer: SessionUser, session_id: str) -> TrainingSessionModel:
        session = await self.sessions.get_by_id(session_id)
        if not session:
            raise EntityNotFoundException("Sesion", session_id)
        if viewer.is_admin or viewer.id in (session.trainer_id, session.client_id):
            return session
        raise ForbiddenException("No participas en esta sesión")
    
    # Pedidos de sesion
    
    async def list_requests(self, viewer: SessionUser, status: Optional[str] = None) -> List[SessionRequestDTO]:
        if viewer.is_admin:
            rows = await self.requests.list_recent(status)
        elif viewer.is_pt:
            rows = await self.requests.list_for_trainer(viewer.id)
        else:
            rows = await self.requests.list_for_client(viewer.id)
        if status and not viewer.is_admin:
            wanted = to_approval_status(status)
            rows = [row for row in rows if to_approval_status(row.status) is wanted]
        return [SessionRequestDTO.model_validate(row) for row in rows]
    
    async def create_request(self, viewer: SessionUser, dto: SessionRequestCreateDTO) -> SessionRequestDTO:
        """
        Pedido de sesion de un cliente. Con `session_id` es un reagendamiento
        de una sesion existente del propio cliente.
        """
        kind = "new"
        trainer_id = dto.trainer_id
        if dto.session_id:
            session = await self.sessions.get_by_id(dto.session_id)
            if not session:
                raise EntityNotFoundException("Sesion", dto.session_id)
            if session.client_id != viewer.id:
                raise ForbiddenException("Solo puedes reagendar tus propias sesiones")
            kind = "reschedule"
            trainer_id = trainer_id or session.trainer_id
        
        if not trainer_id:
            trainer_ids = await self.links.get_trainer_ids(viewer.id)
            trainer_id = trainer_ids[0] if trainer_ids else None
        if not trainer_id:
            raise ValidationException("Indica el PT al que va dirigido el pedido", field="trainer_id")
        
        request = await self.requests.create(
            client_id=viewer.id,
            trainer_id=trainer_id,
            session_id=dto.session_id,
            kind=kind,
            requested_start=DateTimeUtils.ensure_aware(dto.requested_start),
            duration_min=dto.duration_min,
            notes=dto.notes,
            status=ApprovalStatus.PENDING.value,
        )
        title = "Pedido de reagendamiento" if kind == "reschedule" else "Nuevo pedido de sesión"
        await self.notifications.create_many(
            [trainer_id], title, f"{viewer.display_name} pidió una sesión", "session_request",
        )
        return SessionRequestDTO.model_validate(request)
    
    async def decide_request(
        self,
        viewer: SessionUser,
        request_id: str,
        raw_status: str,
    ) -> Tuple[SessionRequestDTO, Optional[TrainingSessionDTO]]:
        """
        Aprueba o rechaza un pedido. Al aprobar se crea la sesion (o se
        mueve la existente si es un reagendamiento).
        """
        decision = to_approval_status(raw_status)
        if decision not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
            raise ValidationException("El estado debe ser 'approved' o 'rejected'", field="status")
        
        request = await self.requests.get_by_id(request_id)
        if not request:
            raise EntityNotFoundException("Pedido", request_id)
        if not (viewer.is_admin or request.trainer_id == viewer.id):
            raise ForbiddenException("El pedido no es tuyo")
        if to_approval_status(request.status) is not ApprovalStatus.PENDING:
            raise ValidationException("El pedido ya fue decidido", field="status")
        
        session = None
        if decision is ApprovalStatus.APPROVED:
            session = await self._apply_request(request)
        
        request = await self.requests.decide(
            request, decision.value, viewer.id, session.id if session else None,
        )
        await self.audit.record(
            AuditKind.SESSION_REQUEST_DECISION, viewer.id, "session_request", request.id,
            f"Pedido {decision.value}", {"kind": request.kind, "session_id": request.session_id},
        )
        notice = "Tu pedido de sesión fue aprobado" if session else "Tu pedido de sesión fue rechazado"
        await self.notifications.create_many([request.client_id], notice, None, "session_request")
        
        return (
            SessionRequestDTO.model_validate(request),
            TrainingSessionDTO.model_validate(session) if session else None,
        )
    
    async def _apply_request(self, request) -> TrainingSessionModel:
        start = DateTimeUtils.parse(request.requested_start)
        if start is None:
            raise ValidationException("El pedido no tiene fecha", field="requested_start")
        if request.kind == "reschedule" and request.session_id:
            session = await self.sessions.get_by_id(request.session_id)
            if session:
                return await self.sessions.update(session, {
                    "scheduled_at": start,
                    "duration_min": request.duration_min or session.duration_min,
                    "status": "scheduled",
                })
        if request.trainer_id:
            await self.links.link(request.trainer_id, request.client_id)
        return await self.sessions.create(
            trainer_id=request.trainer_id,
            client_id=request.client_id,
            scheduled_at=start,
            duration_min=request.duration_min or 60,
            notes=request.notes,
            status="scheduled",
        )
