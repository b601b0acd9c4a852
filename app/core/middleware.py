"""
Configuración de Middleware para la aplicación FastAPI.

Este módulo centraliza toda la configuración de middleware incluyendo:
- CORS
- TrustedHost
- Request logging con identificador de request
- Security headers
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from app.core.config import Settings, get_settings
from app.core.logging_config import request_id_var

logger = logging.getLogger(__name__)


def configure_cors_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configura middleware CORS para permitir requests cross-origin.

    Args:
        app: Instancia de FastAPI
        settings: Configuración de la aplicación
    """
    allowed_origins = settings.ALLOWED_HOSTS or ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Accept-Language", "Content-Language", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Process-Time", "X-Request-ID"],
    )

    logger.info(f"✅ CORS configurado - Origins permitidos: {allowed_origins}")


def configure_trusted_host_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configura middleware TrustedHost para validar hosts permitidos.
    Solo se aplica fuera de DEBUG y con ALLOWED_HOSTS definido.

    Args:
        app: Instancia de FastAPI
        settings: Configuración de la aplicación
    """
    if not settings.DEBUG and settings.ALLOWED_HOSTS:
        allowed_hosts = settings.ALLOWED_HOSTS + ["localhost", "127.0.0.1"]
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)
        logger.info(f"✅ TrustedHost configurado - Hosts permitidos: {allowed_hosts}")


def configure_request_logging_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configura middleware para logging de todas las requests/responses.

    Args:
        app: Instancia de FastAPI
        settings: Configuración de la aplicación
    """

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        """
        Loggea cada request/response y agrega X-Request-ID y X-Process-Time.

        Un X-Request-ID recibido se reutiliza; si no, se genera uno corto.
        """
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        start_time = time.perf_counter()
        logger.info(f"📨 [{request_id}] {request.method} {request.url.path} - Client: {get_client_ip(request)}")
        if request.url.query:
            logger.debug(f"🔍 [{request_id}] Query params: {request.url.query}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.perf_counter() - start_time
            logger.error(
                f"❌ [{request_id}] {request.method} {request.url.path} - Error: {str(e)} - Time: {process_time:.3f}s"
            )
            raise
        finally:
            request_id_var.reset(token)

        process_time = time.perf_counter() - start_time
        logger.info(
            f"{get_status_emoji(response.status_code)} [{request_id}] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - Time: {process_time:.3f}s"
        )

        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        response.headers["X-Request-ID"] = request_id

        if process_time > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"🐌 [{request_id}] Slow request detected: {process_time:.3f}s > {settings.SLOW_REQUEST_THRESHOLD}s"
            )

        return response


def configure_security_headers_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configura middleware para agregar headers de seguridad.

    Args:
        app: Instancia de FastAPI
        settings: Configuración de la aplicación
    """

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # HSTS solo en producción con HTTPS
        if not settings.DEBUG and request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


def configure_all_middleware(app: FastAPI, settings: Settings | None = None) -> None:
    """
    Configura todos los middlewares de la aplicación.
    El orden importa: se ejecutan en orden inverso al que se agregan.

    Args:
        app: Instancia de FastAPI
        settings: Configuración (por defecto la global)
    """
    settings = settings or get_settings()
    logger.info("🔧 Configurando middlewares...")

    configure_security_headers_middleware(app, settings)
    configure_request_logging_middleware(app, settings)
    configure_trusted_host_middleware(app, settings)
    # CORS último en agregarse, primero en ejecutarse para OPTIONS
    configure_cors_middleware(app, settings)

    logger.info("✅ Todos los middlewares configurados correctamente")


# Funciones auxiliares


def generate_request_id() -> str:
    """
    Genera un ID corto para cada request.

    Returns:
        str: ID de 8 caracteres
    """
    return uuid.uuid4().hex[:8]


def get_client_ip(request: Request) -> str:
    """
    Obtiene la IP real del cliente considerando proxies.

    Args:
        request: Request de FastAPI

    Returns:
        str: IP del cliente
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Primera IP en caso de múltiples proxies
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def get_status_emoji(status_code: int) -> str:
    """
    Obtiene emoji apropiado según el código de estado HTTP.
    """
    if 200 <= status_code < 300:
        return "✅"
    elif 300 <= status_code < 400:
        return "↩️"
    elif 400 <= status_code < 500:
        return "⚠️"
    elif 500 <= status_code < 600:
        return "❌"
    return "📤"
