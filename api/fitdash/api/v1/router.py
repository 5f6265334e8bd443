"""
Router principal de la API v1.
Agrupa todos los endpoints de la version 1.
"""
from fastapi import APIRouter

from fitdash.api.v1.endpoints import admin, auth, dashboard, events, messages, plans, profile, sessions


# Router principal de la API v1
api_router = APIRouter(prefix="/v1")

# Incluir routers de endpoints especificos
api_router.include_router(auth.router)
api_router.include_router(dashboard.router)
api_router.include_router(dashboard.trainer_router)
api_router.include_router(admin.router)
api_router.include_router(profile.router)
api_router.include_router(profile.notes_router)
api_router.include_router(plans.router)
api_router.include_router(sessions.router)
api_router.include_router(sessions.requests_router)
api_router.include_router(messages.router)
api_router.include_router(messages.notifications_router)
api_router.include_router(events.router)
