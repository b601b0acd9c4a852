"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación:
logging, verificación de configuración y conexión a la base de datos.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import get_settings
from app.core.logging_config import setup_logging
from app.db.connection import get_db_connection

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    settings = get_settings()
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    try:
        # 1. Configurar logging
        await startup_configure_logging()

        # 2. Verificar configuración
        await startup_verify_configuration()

        # 3. Inicializar base de datos
        await startup_initialize_database()

        # 4. Verificaciones finales
        await startup_final_checks()

        logger.info("🎉 Aplicación iniciada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await shutdown_close_connections()
        sys.exit(1)

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")

    try:
        await shutdown_close_connections()
        logger.info("👋 Aplicación cerrada correctamente")
    except Exception as e:
        logger.error(f"❌ Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    try:
        setup_logging()
        logger.info("✅ Sistema de logging configurado")
    except Exception as e:
        print(f"Error configurando logging: {e}")
        raise


async def startup_verify_configuration():
    """Verifica reglas de configuración que dependen de varias variables."""
    settings = get_settings()

    if settings.is_production and settings.DEBUG:
        logger.warning("⚠️ DEBUG activo en producción: los errores 5xx expondrán detalles")

    if settings.is_production and settings.is_sqlite:
        logger.warning("⚠️ SQLite en producción: sin concurrencia real de escritura")

    logger.info("✅ Configuración verificada")


async def startup_initialize_database():
    """Inicializa el engine y, si corresponde, crea las tablas."""
    conn_db = get_db_connection()
    if not conn_db.is_initialized():
        logger.info("Inicializando conexión a base de datos...")
        await conn_db.initialize()

    health_info = await conn_db.health_check()
    logger.info(f"✅ Base de datos lista ({health_info['dialect']}): {health_info['response_time_ms']}ms")


async def startup_final_checks():
    """Loggea la configuración activa."""
    info = get_startup_info()
    logger.info("🔧 Configuración activa:")
    for key, value in info.items():
        logger.info(f"   - {key}: {value}")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_close_connections():
    """Cierra la conexión a la base de datos."""
    try:
        await get_db_connection().close()
        logger.info("✅ Conexión a base de datos cerrada")
    except Exception as e:
        logger.error(f"Error cerrando conexiones: {e}")


def get_startup_info() -> Dict[str, Any]:
    """
    Obtiene información resumida de la configuración de arranque.

    Returns:
        Dict con entorno, base de datos y reglas activas
    """
    settings = get_settings()
    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "database": settings.DATABASE_URL.split("://", 1)[0],
        "variant_update_strategy": settings.VARIANT_UPDATE_STRATEGY,
        "strict_color_resolution": settings.STRICT_COLOR_RESOLUTION,
        "strict_variant_lookup": settings.STRICT_VARIANT_LOOKUP,
        "enforce_order_status_transitions": settings.ENFORCE_ORDER_STATUS_TRANSITIONS,
    }
