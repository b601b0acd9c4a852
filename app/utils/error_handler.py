"""
Sistema de manejo de errores personalizado.

Este módulo define las excepciones del motor de catálogo y pedidos
y proporciona utilidades para un manejo consistente de errores.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de referencia
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    INVALID_REFERENCE = "INVALID_REFERENCE"

    # Errores de unicidad
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
    RESOURCE_IN_USE = "RESOURCE_IN_USE"

    # Errores de datos
    INVALID_PRODUCT_DATA = "INVALID_PRODUCT_DATA"
    INVALID_VARIANT_DATA = "INVALID_VARIANT_DATA"
    INVALID_ORDER_DATA = "INVALID_ORDER_DATA"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    NEGATIVE_TOTAL = "NEGATIVE_TOTAL"

    # Errores de almacenamiento
    DATABASE_ERROR = "DATABASE_ERROR"
    IDENTIFIER_EXHAUSTED = "IDENTIFIER_EXHAUSTED"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
        is_critical: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
            is_critical: Si requiere alerta inmediata
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para datos de entrada malformados o incompletos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            error_code: Código de error específico
            **kwargs: Argumentos adicionales para AppException
        """
        kwargs.setdefault("status_code", 400)
        super().__init__(
            message=message,
            error_code=error_code,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class NotFoundException(AppException):
    """
    Excepción para entidades referenciadas que no existen.

    Por defecto responde 404; las referencias inválidas dentro de un
    payload de creación se lanzan con status_code=400.
    """

    def __init__(
        self,
        resource: str,
        resource_id: Any = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        **kwargs,
    ):
        kwargs.setdefault("status_code", 404)
        super().__init__(
            message=message or f"{resource.capitalize()} not found",
            error_code=error_code,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.resource = resource
        self.resource_id = resource_id

        self.details.update(
            {"resource": resource, "resource_id": str(resource_id) if resource_id is not None else None}
        )


class ConflictException(AppException):
    """
    Excepción para colisiones de campos únicos o recursos en uso.
    """

    def __init__(
        self,
        resource: str,
        field: str,
        value: Any = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DUPLICATE_RESOURCE,
        **kwargs,
    ):
        """
        Inicializa la excepción de conflicto.

        Args:
            resource: Tipo de recurso (brand, category, product...)
            field: Campo en conflicto
            value: Valor duplicado
            message: Mensaje de error opcional
            error_code: Código de error específico
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message or f"A {resource} with this {field} already exists",
            error_code=error_code,
            status_code=409,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.resource = resource
        self.field = field
        self.value = value

        self.details.update({"resource": resource, "field": field, "value": value})


class DatabaseException(AppException):
    """
    Excepción para fallos del almacenamiento relacional.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            is_critical=True,
            **kwargs,
        )
        self.operation = operation
        self.details.update({"operation": operation})


# === FUNCIONES DE UTILIDAD ===


def is_unique_violation(error: IntegrityError, column: Optional[str] = None) -> bool:
    """
    Determina si un IntegrityError proviene de una restricción de unicidad.

    Args:
        error: Error de integridad de SQLAlchemy
        column: Columna a buscar en el mensaje del driver

    Returns:
        bool: True si es una violación de unicidad (sobre la columna indicada)
    """
    text = str(getattr(error, "orig", error)).lower()
    if "unique" not in text and "duplicate" not in text:
        return False
    return column is None or column.lower() in text
