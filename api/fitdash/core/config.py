"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.
Soporta configuracion dinamica para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Configuracion de desarrollo vs produccion:
    - ENVIRONMENT: 'development' o 'production'
    - En desarrollo se puede habilitar el login demo por cookie `role`
    - DATABASE_URL se puede especificar completa o por componentes
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="FitDash - Panel de Coaching")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos - Componentes separados (recomendado para flexibilidad)
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="fitdash_user")
    DATABASE_PASSWORD: str = Field(default="fitdash_pass")
    DATABASE_NAME: str = Field(default="fitdash_db")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # Seguridad
    SECRET_KEY: str = Field(default="change-this-secret-key-in-production")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 12)
    SESSION_COOKIE_NAME: str = Field(default="fp_session")
    SESSION_COOKIE_SECURE: bool = Field(default=False)

    # Login demo heredado (cookie `role` sin firma). Solo para desarrollo.
    LEGACY_ROLE_COOKIE_ENABLED: bool = Field(default=False)

    # Facturacion: PTs habilitados (ids o emails separados por coma)
    BILLING_PT_IDS: str = Field(default="")
    BILLING_PT_EMAILS: str = Field(default="")

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Dashboards
    DEFAULT_TIMEZONE: str = Field(default="Europe/Lisbon")
    CLIENT_DASHBOARD_RANGE_DAYS: int = Field(default=30)
    MESSAGES_DASHBOARD_RANGE_DAYS: int = Field(default=14)

    # Eventos (SSE)
    SSE_HEARTBEAT_SECONDS: float = Field(default=25.0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    # Rate limiting (login)
    RATE_LIMIT_PER_MINUTE: int = Field(default=10)

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


def parse_csv_setting(raw: str) -> List[str]:
    """Convierte 'a, b c' en ['a', 'b', 'c'] ignorando vacios."""
    if not raw:
        return []
    return [part.strip() for part in raw.replace(",", " ").split() if part.strip()]


# Instancia global de configuracion
settings = Settings()
