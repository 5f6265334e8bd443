"""
Repositorio de notas internas por usuario.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import UserNoteModel


class NoteRepository:
    """Notas de PTs/admins sobre un usuario, ordenadas de mas nueva a mas vieja."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list_for_user(self, user_id: str, limit: int = 100) -> List[UserNoteModel]:
        result = await self.db.execute(
            select(UserNoteModel)
            .where(UserNoteModel.user_id == user_id)
            .order_by(UserNoteModel.created_at.desc(), UserNoteModel.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    
    async def create(self, user_id: str, body: str, author_id: Optional[str]) -> UserNoteModel:
        note = UserNoteModel(user_id=user_id, body=body, author_id=author_id)
        self.db.add(note)
        await self.db.flush()
        await self.db.refresh(note)
        return note
