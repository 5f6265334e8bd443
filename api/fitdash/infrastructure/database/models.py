"""
Modelos de base de datos (ORM).

Los identificadores de usuarios, planes, sesiones y mensajes son UUID en
texto para poder importar datos historicos sin reasignar claves.
"""
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from fitdash.infrastructure.database.session import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class UserModel(Base):
    """
    Modelo de base de datos para cuentas de usuario.

    `role` guarda la representacion de BD (ADMIN, TRAINER, CLIENT) y
    `status` el ciclo de vida (PENDING, ACTIVE, SUSPENDED). Los valores
    heredados se coaccionan al leerlos con `normalize_role` / `to_status`.
    """
    
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default="CLIENT", index=True)
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    password_hash = Column(String(255), nullable=True)
    approved_by = Column(String(36), nullable=True)
    status_changed_at = Column(DateTime(timezone=True), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role}, status={self.status})>"


class TrainerClientModel(Base):
    """Relacion PT -> cliente."""
    
    __tablename__ = "trainer_clients"
    __table_args__ = (UniqueConstraint("trainer_id", "client_id", name="uq_trainer_client"),)
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    trainer_id = Column(String(36), nullable=False, index=True)
    client_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TrainingPlanModel(Base):
    """Modelo de base de datos para planes de entrenamiento."""
    
    __tablename__ = "training_plans"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="DRAFT", index=True)
    client_id = Column(String(36), nullable=True, index=True)
    trainer_id = Column(String(36), nullable=True, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    content = Column(JSON, nullable=True)  # dias / ejercicios del plan
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    def __repr__(self):
        return f"<TrainingPlan(id={self.id}, title={self.title}, status={self.status})>"


class TrainingSessionModel(Base):
    """Sesion de entrenamiento agendada entre un PT y un cliente."""
    
    __tablename__ = "training_sessions"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    trainer_id = Column(String(36), nullable=True, index=True)
    client_id = Column(String(36), nullable=True, index=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True, index=True)
    duration_min = Column(Integer, nullable=True, default=60)
    location = Column(String(255), nullable=True)
    status = Column(String(30), nullable=True, default="scheduled")
    client_attendance_status = Column(String(30), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    def __repr__(self):
        return f"<TrainingSession(id={self.id}, scheduled_at={self.scheduled_at}, status={self.status})>"


class SessionRequestModel(Base):
    """Pedido de sesion o de reagendamiento hecho por un cliente."""
    
    __tablename__ = "session_requests"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(String(36), nullable=False, index=True)
    trainer_id = Column(String(36), nullable=True, index=True)
    session_id = Column(String(36), nullable=True)
    kind = Column(String(30), nullable=False, default="new")  # new | reschedule
    requested_start = Column(DateTime(timezone=True), nullable=True)
    duration_min = Column(Integer, nullable=True, default=60)
    status = Column(String(20), nullable=False, default="pending", index=True)
    notes = Column(Text, nullable=True)
    decided_by = Column(String(36), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class NotificationModel(Base):
    """Notificacion dentro de la app."""
    
    __tablename__ = "notifications"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)
    type = Column(String(50), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)


class MessageModel(Base):
    """Mensaje directo entre dos usuarios."""
    
    __tablename__ = "messages"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    from_id = Column(String(36), nullable=True, index=True)
    to_id = Column(String(36), nullable=True, index=True)
    body = Column(Text, nullable=True)
    channel = Column(String(30), nullable=True)
    reply_to_id = Column(String(36), nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)


class AnthropometryModel(Base):
    """Medicion corporal de un cliente."""
    
    __tablename__ = "anthropometry"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    measured_at = Column(DateTime(timezone=True), nullable=True, index=True)
    weight_kg = Column(Float, nullable=True)
    body_fat_pct = Column(Float, nullable=True)
    bmi = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(36), nullable=True)


class ClientWalletModel(Base):
    """Saldo de la carteira de un cliente."""
    
    __tablename__ = "client_wallets"
    
    user_id = Column(String(36), primary_key=True)
    balance = Column(Float, nullable=False, default=0.0)
    currency = Column(String(3), nullable=False, default="EUR")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ClientWalletEntryModel(Base):
    """Movimiento de la carteira (positivo = carga, negativo = consumo)."""
    
    __tablename__ = "client_wallet_entries"
    
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserNoteModel(Base):
    """Nota interna de un PT/admin sobre un usuario."""
    
    __tablename__ = "user_notes"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    author_id = Column(String(36), nullable=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SystemServiceModel(Base):
    """Servicio monitorizado (API, BD, correo...)."""
    
    __tablename__ = "system_services"
    
    id = Column(String(64), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    state = Column(String(20), nullable=True)
    latency_ms = Column(Float, nullable=True)
    uptime_percent = Column(Float, nullable=True)
    incidents_30d = Column(Integer, nullable=True)
    trend_label = Column(String(255), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class SystemMonitorModel(Base):
    """Monitor / alerta configurado."""
    
    __tablename__ = "system_monitors"
    
    id = Column(String(64), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    detail = Column(Text, nullable=True)
    status = Column(String(20), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class SystemResiliencePracticeModel(Base):
    """Practica de resiliencia (backups, failover...)."""
    
    __tablename__ = "system_resilience_practices"
    
    id = Column(String(64), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    detail = Column(Text, nullable=True)
    status = Column(String(20), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class AuditLogModel(Base):
    """Registro persistente de acciones administrativas."""
    
    __tablename__ = "audit_log"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(50), nullable=False, index=True)
    actor_id = Column(String(36), nullable=True)
    target_type = Column(String(50), nullable=True)
    target_id = Column(String(64), nullable=True)
    message = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
