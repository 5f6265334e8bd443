"""
Repositorio de la carteira del cliente (saldo y movimientos).
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.infrastructure.database.models import ClientWalletEntryModel, ClientWalletModel


class WalletRepository:
    """Repositorio de solo lectura usado por el dashboard del cliente."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_wallet(self, user_id: str) -> Optional[ClientWalletModel]:
        result = await self.db.execute(
            select(ClientWalletModel).where(ClientWalletModel.user_id == user_id)
        )
        return result.scalar_one_or_none()
    
    async def list_entries(self, user_id: str, limit: int = 24) -> List[ClientWalletEntryModel]:
        result = await self.db.execute(
            select(ClientWalletEntryModel)
            .where(ClientWalletEntryModel.user_id == user_id)
            .order_by(ClientWalletEntryModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
