"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from fitdash.infrastructure.database.models import (
    UserModel,
    TrainerClientModel,
    TrainingPlanModel,
    TrainingSessionModel,
    SessionRequestModel,
    NotificationModel,
    MessageModel,
    AnthropometryModel,
    ClientWalletModel,
    ClientWalletEntryModel,
    UserNoteModel,
    SystemServiceModel,
    SystemMonitorModel,
    SystemResiliencePracticeModel,
    AuditLogModel,
)
