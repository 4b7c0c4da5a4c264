"""
Configuración del cliente SIGA
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "SIGA"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Backend SaaS
    API_BASE_URL: str = "http://localhost:3000"
    REQUEST_TIMEOUT: float = 30.0

    # Indicadores económicos (mindicador.cl)
    INDICATORS_BASE_URL: str = "https://mindicador.cl/api"
    INDICATORS_TIMEOUT: float = 10.0

    # Almacenamiento local de sesión
    DATABASE_URL: str = "sqlite:///siga_session.db"

    # UTM: si la serie viene vacía se muestra un valor aproximado
    UTM_FALLBACK_ENABLED: bool = True
    UTM_FALLBACK_VALUE: float = 66500.0

    # Preferencias
    DEFAULT_CARD_SIZE: str = "MEDIUM"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
