"""
Casos de uso de los dashboards.

Cada loader consulta los repositorios del rol, traduce las filas ORM a
registros planos y delega en el builder puro correspondiente. Si la base de
datos falla se devuelve el dashboard de respaldo (builder con fuente vacia)
marcado con `source="fallback"`; los dashboards nunca propagan errores de BD.
"""
from datetime import datetime, timedelta, tzinfo
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar, Union

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.dto.admin_dashboard_dto import AdminDashboardDTO
from fitdash.application.dto.client_dashboard_dto import ClientDashboardDTO
from fitdash.application.dto.messages_dashboard_dto import MessagesDashboardDTO
from fitdash.application.dto.system_health_dto import SystemHealthDashboardDTO
from fitdash.application.dto.trainer_dashboard_dto import TrainerCountsDTO, TrainerDashboardDTO
from fitdash.application.services.admin_dashboard_builder import build_admin_dashboard
from fitdash.application.services.client_dashboard_builder import build_client_dashboard
from fitdash.application.services.messages_dashboard_builder import (
    REPLY_WINDOW_MINUTES,
    build_messages_dashboard,
    clamp_range,
)
from fitdash.application.services.system_health_builder import build_system_health_dashboard
from fitdash.application.services.trainer_dashboard_builder import build_trainer_dashboard
from fitdash.core.config import settings
from fitdash.domain.entities.dashboard_sources import (
    AccountApprovalRecord,
    AdminDashboardSource,
    ClientDashboardSource,
    MeasurementRecord,
    MessageRecord,
    MessagesDashboardSource,
    MonitorRecord,
    NotificationRecord,
    PlanRecord,
    ServiceRecord,
    SessionRecord,
    SystemHealthSource,
    TrainerApprovalRecord,
    TrainerClientRecord,
    TrainerDashboardSource,
    WalletEntryRecord,
    WalletRecord,
)
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database.models import (
    TrainingPlanModel,
    TrainingSessionModel,
)
from fitdash.infrastructure.repositories.measurement_repository import MeasurementRepository
from fitdash.infrastructure.repositories.message_repository import MessageRepository
from fitdash.infrastructure.repositories.notification_repository import NotificationRepository
from fitdash.infrastructure.repositories.plan_repository import PlanRepository
from fitdash.infrastructure.repositories.session_request_repository import SessionRequestRepository
from fitdash.infrastructure.repositories.system_health_repository import SystemHealthRepository
from fitdash.infrastructure.repositories.training_session_repository import TrainingSessionRepository
from fitdash.infrastructure.repositories.user_repository import TrainerClientRepository, UserRepository
from fitdash.infrastructure.repositories.wallet_repository import WalletRepository
from fitdash.shared.constants.roles import normalize_role
from fitdash.shared.constants.status_constants import to_status
from fitdash.shared.utils.datetime_utils import DateTimeUtils, resolve_timezone


DashboardT = TypeVar("DashboardT", bound=BaseModel)

ADMIN_APPROVALS_SAMPLE = 500
TRAINER_LOOKBACK_DAYS = 28
TRAINER_LOOKAHEAD_DAYS = 30
CLIENT_LOOKAHEAD_DAYS = 90


def _plan_record(row: TrainingPlanModel) -> PlanRecord:
    return PlanRecord(
        id=row.id,
        title=row.title,
        status=row.status,
        client_id=row.client_id,
        trainer_id=row.trainer_id,
        start_date=row.start_date,
        end_date=row.end_date,
        updated_at=row.updated_at or row.created_at,
        notes=row.notes,
    )


def _session_record(row: TrainingSessionModel, names: Optional[Dict[str, str]] = None) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        trainer_id=row.trainer_id,
        client_id=row.client_id,
        client_name=(names or {}).get(row.client_id or ""),
        scheduled_at=row.scheduled_at,
        duration_min=row.duration_min,
        location=row.location,
        status=row.status,
        attendance_status=row.client_attendance_status,
    )


def _canonical_role(value: Optional[str]) -> Optional[str]:
    role = normalize_role(value)
    return role.value if role else value


def _ids(values: Iterable[Optional[str]]) -> List[str]:
    return sorted({value for value in values if value})


class DashboardUseCases:
    """
    Loaders de los dashboards por rol.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.links = TrainerClientRepository(db)
        self.plans = PlanRepository(db)
        self.sessions = TrainingSessionRepository(db)
        self.requests = SessionRequestRepository(db)
        self.notifications = NotificationRepository(db)
        self.messages = MessageRepository(db)
        self.measurements = MeasurementRepository(db)
        self.wallets = WalletRepository(db)
        self.system = SystemHealthRepository(db)

    async def _with_fallback(
        self,
        name: str,
        load: Callable[[], Awaitable[DashboardT]],
        fallback: Callable[[], DashboardT],
    ) -> DashboardT:
        """
        Ejecuta el loader y, ante un error de base de datos, devuelve el
        dashboard de respaldo.
        """
        try:
            return await load()
        except SQLAlchemyError as exc:
            logger.error(f"Dashboard {name}: fallo de base de datos, usando respaldo ({exc.__class__.__name__}: {exc})")
            await self.db.rollback()
            dashboard = fallback()
            return dashboard.model_copy(update={"source": "fallback"})

    # Cliente

    async def load_client_dashboard(
        self,
        client_id: str,
        range_days: Optional[int] = None,
        tz: Optional[tzinfo] = None,
        now: Optional[datetime] = None,
    ) -> ClientDashboardDTO:
        now = now or DateTimeUtils.now_utc()
        tz = tz or resolve_timezone(settings.DEFAULT_TIMEZONE)
        days = max(1, int(range_days or settings.CLIENT_DASHBOARD_RANGE_DAYS))

        async def load() -> ClientDashboardDTO:
            since = DateTimeUtils.start_of_day(now - timedelta(days=days * 2), tz)
            until = now + timedelta(days=CLIENT_LOOKAHEAD_DAYS)
            plans = await self.plans.get_by_client(client_id)
            sessions = await self.sessions.list_between(since, until, client_id=client_id)
            notifications = await self.notifications.list_for_user(client_id)
            measurements = await self.measurements.list_for_user(client_id)
            wallet = await self.wallets.get_wallet(client_id)
            entries = await self.wallets.list_entries(client_id)
            trainer_names = await self.users.get_names(
                _ids([plan.trainer_id for plan in plans] + [row.trainer_id for row in sessions])
            )

            source = ClientDashboardSource(
                now=now,
                range_days=days,
                tz=tz,
                plans=[_plan_record(plan) for plan in plans],
                sessions=[_session_record(row) for row in sessions],
                notifications=[
                    NotificationRecord(
                        id=row.id, title=row.title, type=row.type, read=row.read, created_at=row.created_at,
                    )
                    for row in notifications
                ],
                measurements=[
                    MeasurementRecord(
                        measured_at=row.measured_at,
                        weight_kg=row.weight_kg,
                        body_fat_pct=row.body_fat_pct,
                        bmi=row.bmi,
                    )
                    for row in measurements
                ],
                wallet=WalletRecord(
                    balance=wallet.balance, currency=wallet.currency, updated_at=wallet.updated_at,
                ) if wallet else None,
                wallet_entries=[
                    WalletEntryRecord(
                        id=row.id, amount=row.amount, description=row.description, created_at=row.created_at,
                    )
                    for row in entries
                ],
                trainer_names=trainer_names,
            )
            return build_client_dashboard(source, client_id=client_id)

        return await self._with_fallback(
            "cliente",
            load,
            lambda: build_client_dashboard(ClientDashboardSource.empty(now, days, tz), client_id=client_id),
        )

    # PT

    async def load_trainer_dashboard(
        self,
        viewer: SessionUser,
        tz: Optional[tzinfo] = None,
        now: Optional[datetime] = None,
    ) -> TrainerDashboardDTO:
        """
        Dashboard del PT. Un ADMIN ve el agregado de todos los PTs.
        """
        now = now or DateTimeUtils.now_utc()
        tz = tz or resolve_timezone(settings.DEFAULT_TIMEZONE)
        trainer_id = None if viewer.is_admin else viewer.id

        async def load() -> TrainerDashboardDTO:
            since = DateTimeUtils.start_of_day(now - timedelta(days=TRAINER_LOOKBACK_DAYS), tz)
            until = now + timedelta(days=TRAINER_LOOKAHEAD_DAYS)
            sessions = await self.sessions.list_between(since, until, trainer_id=trainer_id, limit=600)
            if trainer_id:
                plans = await self.plans.get_by_trainer(trainer_id)
                links = await self.links.get_links(trainer_id)
                requests = await self.requests.list_for_trainer(trainer_id)
                client_ids = _ids(link.client_id for link in links)
                linked_at = {link.client_id: link.created_at for link in links}
            else:
                plans = await self.plans.list_all()
                requests = []
                clients = await self.users.list_users(role="CLIENT", limit=ADMIN_APPROVALS_SAMPLE)
                client_ids = [client.id for client in clients]
                linked_at = {client.id: client.created_at for client in clients}

            client_rows = await self.users.get_by_ids(
                _ids(client_ids + [row.client_id for row in sessions] + [row.client_id for row in requests])
            )
            names = {row.id: row.name or row.email for row in client_rows}
            by_id = {row.id: row for row in client_rows}

            last_session: Dict[str, datetime] = {}
            next_session: Dict[str, datetime] = {}
            for row in sessions:
                when = DateTimeUtils.parse(row.scheduled_at)
                if not row.client_id or when is None:
                    continue
                if when <= now:
                    if row.client_id not in last_session or when > last_session[row.client_id]:
                        last_session[row.client_id] = when
                elif row.client_id not in next_session or when < next_session[row.client_id]:
                    next_session[row.client_id] = when

            clients_records = []
            for client_id in client_ids:
                user = by_id.get(client_id)
                clients_records.append(TrainerClientRecord(
                    id=client_id,
                    name=user.name if user else None,
                    email=user.email if user else None,
                    status=user.status if user else None,
                    linked_at=linked_at.get(client_id),
                    last_session_at=last_session.get(client_id),
                    next_session_at=next_session.get(client_id),
                ))

            source = TrainerDashboardSource(
                now=now,
                trainer_id=trainer_id,
                trainer_name=viewer.name,
                tz=tz,
                clients=clients_records,
                sessions=[_session_record(row, names) for row in sessions],
                plans=[_plan_record(plan) for plan in plans],
                approvals=[
                    TrainerApprovalRecord(
                        id=row.id,
                        client_id=row.client_id,
                        client_name=names.get(row.client_id),
                        requested_at=row.created_at,
                        status=row.status,
                        type=row.kind,
                        notes=row.notes,
                    )
                    for row in requests
                ],
            )
            return build_trainer_dashboard(source)

        return await self._with_fallback(
            "PT",
            load,
            lambda: build_trainer_dashboard(TrainerDashboardSource.empty(now, trainer_id, viewer.name, tz)),
        )

    async def load_trainer_counts(self, viewer: SessionUser, now: Optional[datetime] = None) -> TrainerCountsDTO:
        """Contadores de la barra lateral del PT (todo a cero si la BD falla)."""
        now = now or DateTimeUtils.now_utc()
        trainer_id = None if viewer.is_admin else viewer.id
        try:
            pending = await self.requests.count_pending(trainer_id)
            unread_messages = await self.messages.count_unread(viewer.id)
            unread_notifications = await self.notifications.count_unread(viewer.id)
            upcoming = await self.sessions.count_upcoming(trainer_id, now) if trainer_id else 0
            clients = len(await self.links.get_client_ids(trainer_id)) if trainer_id else 0
        except SQLAlchemyError as exc:
            logger.error(f"Contadores del PT: fallo de base de datos ({exc.__class__.__name__}: {exc})")
            await self.db.rollback()
            return TrainerCountsDTO(source="fallback")
        return TrainerCountsDTO(
            pending_approvals=pending,
            unread_messages=unread_messages,
            unread_notifications=unread_notifications,
            upcoming_sessions=upcoming,
            clients=clients,
        )

    # Admin

    async def load_admin_dashboard(
        self,
        tz: Optional[tzinfo] = None,
        now: Optional[datetime] = None,
    ) -> AdminDashboardDTO:
        """
        Backlog de aprobaciones de cuentas. Cada usuario es un pedido:
        creado al registrarse y decidido cuando un admin cambia su estado.
        """
        now = now or DateTimeUtils.now_utc()
        tz = tz or resolve_timezone(settings.DEFAULT_TIMEZONE)

        async def load() -> AdminDashboardDTO:
            users = await self.users.list_users(limit=ADMIN_APPROVALS_SAMPLE)
            reviewers = await self.users.get_names(_ids(user.approved_by for user in users))
            raw_counts = await self.users.count_by_role_and_status()

            counts: Dict[str, Dict[str, int]] = {}
            for raw_role, statuses in raw_counts.items():
                role = normalize_role(raw_role)
                if role is None:
                    continue
                bucket = counts.setdefault(role.value, {})
                for raw_status, total in statuses.items():
                    status = to_status(raw_status).value
                    bucket[status] = bucket.get(status, 0) + total

            approvals = [
                AccountApprovalRecord(
                    id=user.id,
                    user_id=user.id,
                    name=user.name,
                    email=user.email,
                    role=_canonical_role(user.role),
                    status=to_status(user.status).value,
                    requested_at=user.created_at,
                    decided_at=user.status_changed_at,
                    reviewer_id=user.approved_by,
                    reviewer_name=reviewers.get(user.approved_by or ""),
                )
                for user in users
            ]
            source = AdminDashboardSource(now=now, tz=tz, approvals=approvals, user_counts=counts)
            return build_admin_dashboard(source)

        return await self._with_fallback(
            "admin",
            load,
            lambda: build_admin_dashboard(AdminDashboardSource.empty(now, tz)),
        )

    # Mensajes

    async def load_messages_dashboard(
        self,
        viewer: SessionUser,
        range_days: Union[int, str, None] = None,
        tz: Optional[tzinfo] = None,
        now: Optional[datetime] = None,
    ) -> MessagesDashboardDTO:
        now = now or DateTimeUtils.now_utc()
        tz = tz or resolve_timezone(settings.DEFAULT_TIMEZONE)
        days = clamp_range(range_days if range_days is not None else settings.MESSAGES_DASHBOARD_RANGE_DAYS)

        async def load() -> MessagesDashboardDTO:
            # Periodo actual + periodo anterior + ventana de respuesta
            since = now - timedelta(days=days * 2, minutes=REPLY_WINDOW_MINUTES)
            rows = await self.messages.list_for_user(viewer.id, since=since, limit=2000)
            names = await self.users.get_names(_ids([row.from_id for row in rows] + [row.to_id for row in rows]))
            source = MessagesDashboardSource(
                now=now,
                viewer_id=viewer.id,
                range_days=days,
                tz=tz,
                messages=[
                    MessageRecord(
                        id=row.id,
                        from_id=row.from_id,
                        to_id=row.to_id,
                        from_name=names.get(row.from_id or ""),
                        to_name=names.get(row.to_id or ""),
                        body=row.body,
                        channel=row.channel,
                        sent_at=row.sent_at,
                        reply_to_id=row.reply_to_id,
                    )
                    for row in rows
                ],
            )
            return build_messages_dashboard(source)

        return await self._with_fallback(
            "mensajes",
            load,
            lambda: build_messages_dashboard(MessagesDashboardSource.empty(now, viewer.id, days, tz)),
        )

    # Salud del sistema

    async def load_system_health_dashboard(self, now: Optional[datetime] = None) -> SystemHealthDashboardDTO:
        now = now or DateTimeUtils.now_utc()

        async def load() -> SystemHealthDashboardDTO:
            services = await self.system.list_services()
            monitors = await self.system.list_monitors()
            resilience = await self.system.list_resilience()
            source = SystemHealthSource(
                now=now,
                services=[
                    ServiceRecord(
                        id=row.id,
                        name=row.name,
                        summary=row.description,
                        state=row.state,
                        latency_ms=row.latency_ms,
                        uptime_percent=row.uptime_percent,
                        incidents_30d=row.incidents_30d,
                        trend_label=row.trend_label,
                        updated_at=row.updated_at,
                    )
                    for row in services
                ],
                monitors=[
                    MonitorRecord(id=row.id, title=row.title, detail=row.detail, status=row.status, updated_at=row.updated_at)
                    for row in monitors
                ],
                resilience=[
                    MonitorRecord(id=row.id, title=row.title, detail=row.detail, status=row.status, updated_at=row.updated_at)
                    for row in resilience
                ],
            )
            return build_system_health_dashboard(source)

        return await self._with_fallback(
            "salud del sistema",
            load,
            lambda: build_system_health_dashboard(SystemHealthSource.empty(now)),
        )
