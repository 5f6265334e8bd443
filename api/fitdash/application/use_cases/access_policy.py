"""
Reglas de acceso sobre datos de clientes.

- ADMIN ve y edita todo.
- PT solo accede a los clientes vinculados en `trainer_clients`.
- CLIENT solo accede a sus propios datos.
"""
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.repositories.user_repository import TrainerClientRepository
from fitdash.shared.exceptions.auth import ForbiddenException


async def can_access_client(viewer: SessionUser, client_id: str, links: TrainerClientRepository) -> bool:
    if viewer.is_admin or viewer.id == client_id:
        return True
    if viewer.is_pt:
        return await links.is_linked(viewer.id, client_id)
    return False


async def ensure_client_access(viewer: SessionUser, client_id: str, links: TrainerClientRepository) -> None:
    """
    Raises:
        ForbiddenException: Si el usuario no puede ver los datos del cliente
    """
    if not await can_access_client(viewer, client_id, links):
        raise ForbiddenException("No tienes acceso a los datos de este cliente")
