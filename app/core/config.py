"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
del motor de catálogo y pedidos usando Pydantic Settings para
validación automática.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


VALID_VARIANT_STRATEGIES = ("replace", "reconcile")


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Catalog & Order Engine"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development", env="ENVIRONMENT")
    DEBUG: bool = Field(default=True, env="DEBUG")

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0", env="HOST")
    PORT: int = Field(default=8080, env="PORT")
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")

    # === CONFIGURACIÓN DE SEGURIDAD ===
    ALLOWED_HOSTS: Optional[List[str]] = Field(default=None, env="ALLOWED_HOSTS")

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./data/catalog.db", env="DATABASE_URL")
    DATABASE_ECHO: bool = Field(default=False, env="DATABASE_ECHO")
    # Crea las tablas al arrancar (no hay migraciones)
    DATABASE_CREATE_TABLES: bool = Field(default=True, env="DATABASE_CREATE_TABLES")

    # === CONFIGURACIÓN MONETARIA ===
    CURRENCY: str = Field(default="USD", env="CURRENCY")
    MONEY_DECIMAL_PLACES: int = Field(default=2, env="MONEY_DECIMAL_PLACES")

    # === CONFIGURACIÓN DE IDENTIFICADORES ===
    SKU_PREFIX: str = Field(default="SKU", env="SKU_PREFIX")
    ORDER_NUMBER_PREFIX: str = Field(default="ORD", env="ORDER_NUMBER_PREFIX")
    IDENTIFIER_MAX_ATTEMPTS: int = Field(default=3, env="IDENTIFIER_MAX_ATTEMPTS")

    # === REGLAS DE CATÁLOGO ===
    # "replace" borra y recrea las variantes; "reconcile" conserva ids por (talla, color)
    VARIANT_UPDATE_STRATEGY: str = Field(default="replace", env="VARIANT_UPDATE_STRATEGY")
    STRICT_COLOR_RESOLUTION: bool = Field(default=False, env="STRICT_COLOR_RESOLUTION")
    STRICT_SIZE_VALIDATION: bool = Field(default=False, env="STRICT_SIZE_VALIDATION")
    ENFORCE_SUBCATEGORY_PARENT: bool = Field(default=False, env="ENFORCE_SUBCATEGORY_PARENT")

    # === REGLAS DE PEDIDOS ===
    STRICT_VARIANT_LOOKUP: bool = Field(default=False, env="STRICT_VARIANT_LOOKUP")
    ENFORCE_ORDER_STATUS_TRANSITIONS: bool = Field(default=False, env="ENFORCE_ORDER_STATUS_TRANSITIONS")

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default="logs/app.log", env="LOG_FILE_PATH")
    LOG_MAX_SIZE_MB: int = Field(default=10, env="LOG_MAX_SIZE_MB")
    LOG_BACKUP_COUNT: int = Field(default=5, env="LOG_BACKUP_COUNT")
    SLOW_REQUEST_THRESHOLD: float = Field(default=5.0, env="SLOW_REQUEST_THRESHOLD")

    # === CONFIGURACIÓN DE DOCUMENTACIÓN ===
    ENABLE_DOCS: bool = Field(default=True, env="ENABLE_DOCS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parsea ALLOWED_HOSTS como lista separada por comas."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("VARIANT_UPDATE_STRATEGY")
    @classmethod
    def validate_variant_strategy(cls, v):
        """Valida la estrategia de actualización de variantes."""
        if v.lower() not in VALID_VARIANT_STRATEGIES:
            raise ValueError(f"VARIANT_UPDATE_STRATEGY debe ser uno de: {list(VALID_VARIANT_STRATEGIES)}")
        return v.lower()

    @field_validator("MONEY_DECIMAL_PLACES")
    @classmethod
    def validate_decimal_places(cls, v):
        """Valida la precisión monetaria (0-4 decimales)."""
        if not 0 <= v <= 4:
            raise ValueError("MONEY_DECIMAL_PLACES debe estar entre 0 y 4")
        return v

    @field_validator("IDENTIFIER_MAX_ATTEMPTS")
    @classmethod
    def validate_identifier_attempts(cls, v):
        if v < 1:
            raise ValueError("IDENTIFIER_MAX_ATTEMPTS debe ser al menos 1")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Verifica si está en entorno de desarrollo."""
        return self.ENVIRONMENT == "development"

    @property
    def is_sqlite(self) -> bool:
        """Indica si la base de datos configurada es SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


# Instancia global para uso directo
settings = get_settings()


def get_environment_info() -> dict:
    """
    Obtiene información del entorno actual.

    Returns:
        dict: Información del entorno
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "is_production": settings.is_production,
        "host": settings.HOST,
        "port": settings.PORT,
        "log_level": settings.LOG_LEVEL,
        "rules": {
            "variant_update_strategy": settings.VARIANT_UPDATE_STRATEGY,
            "strict_color_resolution": settings.STRICT_COLOR_RESOLUTION,
            "strict_size_validation": settings.STRICT_SIZE_VALIDATION,
            "strict_variant_lookup": settings.STRICT_VARIANT_LOOKUP,
            "enforce_subcategory_parent": settings.ENFORCE_SUBCATEGORY_PARENT,
            "enforce_order_status_transitions": settings.ENFORCE_ORDER_STATUS_TRANSITIONS,
        },
        "features": {
            "docs": settings.ENABLE_DOCS,
            "sqlite": settings.is_sqlite,
        },
    }
