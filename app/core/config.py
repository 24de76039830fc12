import os
import json
from typing import Annotated, Any, List, Optional, Union
from functools import lru_cache
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Configurar el logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Configuración básica
    API_V1_STR: str = "/api/v1"

    # Información del proyecto
    PROJECT_NAME: str = "GymAdminConsole"
    PROJECT_DESCRIPTION: str = "API de administración multi-gimnasio (super admin y admin de gimnasio)"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "False").lower() in ("true", "1", "t")

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    DATABASE_URL: str = "sqlite:///./gym_admin.db"
    SQLALCHEMY_DATABASE_URI: Optional[str] = Field(None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    def ensure_proper_url_format(cls, v: Optional[str]) -> str:
        """Asegura que DATABASE_URL esté en el formato correcto."""
        # No loguear el valor completo por seguridad
        if not v:
            return "sqlite:///./gym_admin.db"
        if v.startswith('postgres://'):
            logger.info("Corrigiendo formato de postgres:// a postgresql://")
            return 'postgresql://' + v[len('postgres://'):]
        return v

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: Optional[str], info) -> Any:
        """Configura la URI de SQLAlchemy basada en DATABASE_URL si no se definió explícitamente."""
        if v:
            return v
        return info.data.get("DATABASE_URL")

    # Servicio de identidad (email/password + JWT firmados por el proveedor)
    AUTH_API_KEY: str = ""
    AUTH_BASE_URL: str = "https://identitytoolkit.googleapis.com/v1"
    AUTH_JWKS_URL: str = "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
    AUTH_AUDIENCE: str = ""
    AUTH_ISSUER: str = Field("", validate_default=True)
    AUTH_ALGORITHMS: Annotated[List[str], NoDecode] = ["RS256"]
    AUTH_TIMEOUT_SECONDS: float = 10.0

    @field_validator("AUTH_ALGORITHMS", mode="before")
    def assemble_auth_algorithms(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("AUTH_ISSUER", mode="before")
    def assemble_auth_issuer(cls, v: Optional[str], info) -> str:
        if v:
            return v
        audience = info.data.get("AUTH_AUDIENCE")
        if audience:
            return f"https://securetoken.google.com/{audience}"
        return ""

    # Reglas de membresía
    DEFAULT_PLAN_DURATION_MONTHS: int = 1
    EXPIRING_SOON_DAYS: int = 7
    REPORT_FLAG_THRESHOLD: int = 3
    DASHBOARD_LIST_LIMIT: int = 5
    RECENT_MEMBER_DAYS: int = 30
    DEFAULT_GYM_TIMEZONE: str = "Asia/Kolkata"

    # Índices compuestos declarados: "coleccion:campo_eq[,campo_eq...]:campo_orden"
    DECLARED_INDEXES: Annotated[List[str], NoDecode] = [
        "enrollments:gym_id:created_at",
        "enrollments:gym_id,status:created_at",
        "gym_reports:gym_id:created_at",
        "users:gym_id,role:created_at",
    ]

    @field_validator("DECLARED_INDEXES", mode="before")
    def assemble_declared_indexes(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            if v.startswith("["):
                return json.loads(v)
            # Separador ';' porque los campos de igualdad usan ','
            return [i.strip() for i in v.split(";") if i.strip()]
        return v

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5 per minute"


# Usar una función con caché para obtener la configuración
@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.info("Configuración cargada correctamente")
    return settings
