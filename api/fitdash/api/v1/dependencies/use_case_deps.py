"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.application.use_cases.admin_use_cases import AdminUseCases
from fitdash.application.use_cases.auth_use_cases import AuthUseCases
from fitdash.application.use_cases.dashboard_use_cases import DashboardUseCases
from fitdash.application.use_cases.message_use_cases import MessageUseCases, NotificationUseCases
from fitdash.application.use_cases.plan_use_cases import PlanUseCases
from fitdash.application.use_cases.profile_use_cases import ProfileUseCases
from fitdash.application.use_cases.session_use_cases import SessionUseCases
from fitdash.infrastructure.database.session import get_db


def get_auth_use_cases(db: AsyncSession = Depends(get_db)) -> AuthUseCases:
    return AuthUseCases(db)


def get_dashboard_use_cases(db: AsyncSession = Depends(get_db)) -> DashboardUseCases:
    """
    Dependencia para obtener los loaders de dashboards.
    
    Args:
        db: Sesion de base de datos
        
    Returns:
        DashboardUseCases: Instancia de casos de uso de dashboards
    """
    return DashboardUseCases(db)


def get_admin_use_cases(db: AsyncSession = Depends(get_db)) -> AdminUseCases:
    return AdminUseCases(db)


def get_profile_use_cases(db: AsyncSession = Depends(get_db)) -> ProfileUseCases:
    return ProfileUseCases(db)


def get_plan_use_cases(db: AsyncSession = Depends(get_db)) -> PlanUseCases:
    return PlanUseCases(db)


def get_session_use_cases(db: AsyncSession = Depends(get_db)) -> SessionUseCases:
    """
    Dependencia para obtener los casos de uso de agenda.
    
    Returns:
        SessionUseCases: Instancia de casos de uso de sesiones
    """
    return SessionUseCases(db)


def get_message_use_cases(db: AsyncSession = Depends(get_db)) -> MessageUseCases:
    return MessageUseCases(db)


def get_notification_use_cases(db: AsyncSession = Depends(get_db)) -> NotificationUseCases:
    return NotificationUseCases(db)
