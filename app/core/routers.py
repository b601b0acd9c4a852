"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.api.v1.endpoints.brands import router as brands_router
from app.api.v1.endpoints.categories import router as categories_router
from app.api.v1.endpoints.orders import router as orders_router
from app.api.v1.endpoints.products import router as products_router
from app.core.config import get_environment_info, get_settings
from app.db.connection import get_db_connection
from app.version import get_version_info

logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.

        Returns:
            Dict con información de la API
        """
        settings = get_settings()
        return {
            "message": settings.APP_NAME,
            "description": "Back office de catálogo (productos, variantes, marcas, categorías) y pedidos",
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": _now(),
            "endpoints": get_router_info()["base_paths"],
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        """
        Endpoint simple para verificar que la API responde.
        """
        return {"message": "pong", "timestamp": _now()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea el endpoint de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Verifica la conexión con la base de datos.

        Returns:
            200 si la base responde, 503 si no
        """
        settings = get_settings()
        try:
            database = await get_db_connection().health_check()
            healthy = database["test_passed"]

            return JSONResponse(
                status_code=200 if healthy else 503,
                content={
                    "status": "healthy" if healthy else "unhealthy",
                    "version": settings.APP_VERSION,
                    "timestamp": _now(),
                    "services": {"database": database},
                    "environment": settings.ENVIRONMENT,
                    "debug": settings.DEBUG,
                },
            )

        except Exception as e:
            logger.error(f"Error en health check: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": _now(),
                    "version": settings.APP_VERSION,
                },
            )


def create_info_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints informativos adicionales.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/version", tags=["Info"], summary="Version Info")
    async def version_info():
        return {**get_version_info(), "timestamp": _now()}

    @app.get("/config", tags=["Info"], summary="Configuration Info")
    async def config_info():
        """
        Endpoint que retorna configuración (solo en modo debug).

        Returns:
            Dict con configuración (sanitizada)
        """
        if not get_settings().DEBUG:
            return JSONResponse(
                status_code=404,
                content={"message": "Config endpoint only available in debug mode"},
            )

        return {"config": get_environment_info(), "timestamp": _now()}


def configure_api_v1_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la API v1.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API v1...")

    app.include_router(
        products_router,
        prefix=API_V1_PREFIX,
        tags=["Products"],
        responses={404: {"description": "Product not found"}},
    )
    app.include_router(
        orders_router,
        prefix=API_V1_PREFIX,
        tags=["Orders"],
        responses={404: {"description": "Order not found"}},
    )
    app.include_router(
        brands_router,
        prefix=API_V1_PREFIX,
        tags=["Brands"],
        responses={404: {"description": "Brand not found"}, 409: {"description": "Brand conflict"}},
    )
    app.include_router(
        categories_router,
        prefix=API_V1_PREFIX,
        tags=["Categories"],
        responses={404: {"description": "Category not found"}},
    )

    logger.info("✅ Routers de catálogo y pedidos configurados")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    # Endpoints base
    create_root_endpoints(app)
    create_health_endpoints(app)
    create_info_endpoints(app)

    # Routers principales de API v1
    configure_api_v1_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")


def get_router_info() -> Dict[str, Any]:
    """
    Obtiene información sobre los routers configurados.

    Returns:
        Dict con información de routers
    """
    return {
        "api_version": "v1",
        "base_paths": {
            "health": "/health",
            "api_v1": API_V1_PREFIX,
            "products": f"{API_V1_PREFIX}/products",
            "orders": f"{API_V1_PREFIX}/orders",
            "brands": f"{API_V1_PREFIX}/brands",
            "categories": f"{API_V1_PREFIX}/categories",
        },
    }
