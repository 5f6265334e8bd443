"""
Repositorio del registro de auditoria.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import AuditLogModel
from fitdash.shared.utils.audit_logger import AuditLogger


class AuditLogRepository:
    """Persiste las acciones administrativas ademas de escribirlas en el log."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def record(
        self,
        kind: str,
        actor_id: Optional[str],
        target_type: str,
        target_id: Optional[str],
        message: str,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditLogModel:
        entry = AuditLogger.log_action(kind, actor_id, target_type, target_id, message, details)
        row = AuditLogModel(
            kind=kind,
            actor_id=actor_id,
            target_type=target_type,
            target_id=target_id,
            message=message,
            details=entry["details"],
        )
        self.db.add(row)
        await self.db.flush()
        return row
    
    async def list_recent(self, kind: Optional[str] = None, limit: int = 100) -> List[AuditLogModel]:
        query = select(AuditLogModel)
        if kind:
            query = query.where(AuditLogModel.kind == kind)
        query = query.order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
