"""
AuditLogger - Registro estructurado de acciones administrativas.

Proporciona funciones simples para registrar en un archivo diario:
- Aprobaciones y cambios de estado de cuentas
- Envio de notificaciones masivas
- Cambios de planes y sesiones hechos por admins

La persistencia en la tabla `audit_log` la hace AuditLogRepository;
este modulo solo escribe el rastro en disco via loguru.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


class AuditKind:
    """Tipos de evento de auditoria."""
    USER_APPROVE = "USER_APPROVE"
    USER_STATUS_CHANGE = "USER_STATUS_CHANGE"
    NOTIFICATION_BROADCAST = "NOTIFICATION_BROADCAST"
    PLAN_UPDATE = "PLAN_UPDATE"
    SESSION_REQUEST_DECISION = "SESSION_REQUEST_DECISION"
    LOGIN = "LOGIN"


class AuditLogger:
    """
    Gestor de logs de auditoria.

    Uso:
        # Al inicio de la app
        AuditLogger.initialize()

        # En un caso de uso
        AuditLogger.log_action(AuditKind.USER_APPROVE, actor_id, "user", user_id,
                               "Aprobacion de cuenta", {"email": email})
    """

    BASE_LOG_DIR = Path("logs")
    AUDIT_LOG_DIR = BASE_LOG_DIR / "audit_logs"

    FILE_TIMESTAMP_FORMAT = "%Y-%m-%d"
    LOG_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

    _initialized: bool = False
    _sink_id: Optional[int] = None

    @classmethod
    def initialize(cls) -> None:
        """
        Crea la carpeta de auditoria y registra el sink de loguru.
        Debe llamarse al inicio de la aplicacion.
        """
        if cls._initialized:
            return

        cls.AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime(cls.FILE_TIMESTAMP_FORMAT)
        audit_file = cls.AUDIT_LOG_DIR / f"audit_{today}.log"

        cls._sink_id = logger.add(
            str(audit_file),
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}",
            filter=lambda record: record["extra"].get("context") == "audit",
            rotation="1 day",
            retention="90 days",
            level="INFO"
        )

        cls._initialized = True
        logger.info("AuditLogger inicializado")

    @classmethod
    def shutdown(cls) -> None:
        """Retira el sink de auditoria (cierre de la app)."""
        if cls._sink_id is not None:
            logger.remove(cls._sink_id)
        cls._sink_id = None
        cls._initialized = False

    @classmethod
    def build_entry(
        cls,
        kind: str,
        actor_id: Optional[str],
        target_type: str,
        target_id: Optional[str],
        message: str,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Construye el registro serializable de un evento."""
        return {
            "timestamp": datetime.now().strftime(cls.LOG_TIMESTAMP_FORMAT),
            "kind": kind,
            "actor_id": actor_id,
            "target_type": target_type,
            "target_id": target_id,
            "message": message,
            "details": details or {},
        }

    @classmethod
    def log_action(
        cls,
        kind: str,
        actor_id: Optional[str],
        target_type: str,
        target_id: Optional[str],
        message: str,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Registra una accion administrativa.

        Returns:
            Dict[str, Any]: Entrada registrada (util para persistirla)
        """
        entry = cls.build_entry(kind, actor_id, target_type, target_id, message, details)
        audit_logger = logger.bind(context="audit")
        audit_logger.info(json.dumps(entry, default=str, ensure_ascii=False))
        return entry
