"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para cada tipo de error.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.utils.error_handler import AppException, ConflictException, ErrorCode, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


def _envelope(request: Request, error_type: str, message: str, **extra: Any) -> Dict[str, Any]:
    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        **extra,
        "path": str(request.url.path),
        "timestamp": _now(),
        "request_id": _request_id(request),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Los errores de almacenamiento (5xx) no exponen detalles fuera de DEBUG.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"App Exception: {exc.message} - Code: {exc.error_code.value} - URL: {request.url} - Details: {exc.details}")

    expose_details = exc.status_code < 500 or get_settings().DEBUG
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            _envelope(
                request,
                "application_error",
                exc.message if expose_details else "Internal server error occurred",
                error_code=exc.error_code.value,
                details=exc.details if expose_details else None,
            )
        ),
    )


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación de datos.

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    logger.warning(
        f"Validation Exception: {exc.message} - Field: {exc.field} - Value: {exc.invalid_value} - URL: {request.url}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            _envelope(
                request,
                "validation_error",
                exc.message,
                error_code=exc.error_code.value,
                field=exc.field,
                invalid_value=exc.details.get("invalid_value"),
                expected_format=exc.expected_format,
                details=exc.details,
            )
        ),
    )


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    logger.warning(f"Not Found: {exc.resource} {exc.resource_id} - Status: {exc.status_code} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            _envelope(
                request,
                "not_found_error",
                exc.message,
                error_code=exc.error_code.value,
                resource=exc.resource,
                resource_id=exc.details.get("resource_id"),
                details=exc.details,
            )
        ),
    )


async def conflict_exception_handler(request: Request, exc: ConflictException) -> JSONResponse:
    logger.warning(f"Conflict: {exc.resource}.{exc.field}={exc.value} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            _envelope(
                request,
                "conflict_error",
                exc.message,
                error_code=exc.error_code.value,
                field=exc.field,
                details=exc.details,
            )
        ),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para payloads rechazados por los modelos Pydantic.

    Responde 400 con el detalle por campo (en camelCase, tal como se envió).

    Args:
        request: Request de FastAPI
        exc: Error de validación de FastAPI

    Returns:
        JSONResponse: Respuesta JSON con errores por campo
    """
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    logger.warning(f"Request Validation Error: {len(errors)} errors - URL: {request.url} - {errors}")

    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            _envelope(
                request,
                "validation_error",
                "Invalid request data",
                error_code=ErrorCode.VALIDATION_ERROR.value,
                errors=errors,
            )
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de FastAPI y Starlette.

    Args:
        request: Request de FastAPI
        exc: HTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, "http_error", str(exc.detail), status_code=exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url} - "
        f"Traceback: {traceback.format_exc()}"
    )

    # Respuesta genérica (sin exponer detalles internos)
    debug = get_settings().DEBUG
    error_message = f"{type(exc).__name__}: {str(exc)}" if debug else "Internal server error occurred"

    return JSONResponse(
        status_code=500,
        content=_envelope(
            request,
            "internal_server_error",
            error_message,
            error_code=ErrorCode.UNKNOWN_ERROR.value,
            traceback=traceback.format_exc() if debug else None,
        ),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(NotFoundException, not_found_exception_handler)
    app.add_exception_handler(ConflictException, conflict_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
