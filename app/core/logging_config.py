"""
Configuración del sistema de logging.

Este módulo configura el logging de la aplicación con:
- Handler de consola (con colores en modo DEBUG)
- Handlers de archivo con rotación (general y solo errores)
- Formato JSON estructurado en producción
- Identificador de request propagado a cada registro
"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import Settings, get_settings

# Identificador de la request en curso; lo fija el middleware de logging.
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
        "request_id",
    }
)


class ColoredFormatter(logging.Formatter):
    """
    Formatter que agrega colores al nivel de log en consola.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Verde
        "WARNING": "\033[33m",  # Amarillo
        "ERROR": "\033[31m",  # Rojo
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        formatted = super().format(record)

        # Solo si la salida es una terminal
        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{self.COLORS['RESET']}", 1)

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    Formatter para logging estructurado en JSON.
    Útil para sistemas de monitoreo como ELK Stack.
    """

    def format(self, record):
        """
        Formatea el record como JSON estructurado.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje en formato JSON
        """
        settings = get_settings()
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_entry["request_id"] = request_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """
    Filtro que agrega el identificador de la request en curso a cada registro.
    """

    def filter(self, record):
        record.request_id = request_id_var.get()
        return True


def get_logging_configuration(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Genera la configuración de logging para dictConfig.

    Args:
        settings: Configuración a usar (por defecto la global)

    Returns:
        Dict: Configuración de logging
    """
    settings = settings or get_settings()
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_context": {"()": RequestContextFilter}},
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] "
                    "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "colored": {
                "()": ColoredFormatter,
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": StructuredFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": "colored" if settings.DEBUG else "standard",
                "filters": ["request_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    }

    if settings.LOG_FILE_PATH:
        max_bytes = settings.LOG_MAX_SIZE_MB * 1024 * 1024

        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "detailed",
            "filters": ["request_context"],
            "filename": settings.LOG_FILE_PATH,
            "maxBytes": max_bytes,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }

        # Handler de errores separado
        config["handlers"]["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filters": ["request_context"],
            "filename": settings.LOG_FILE_PATH.replace(".log", "_errors.log"),
            "maxBytes": max_bytes,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }
        config["root"]["handlers"].extend(["file", "error_file"])

        # JSON para monitoreo
        if settings.is_production:
            config["handlers"]["json_file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": "json",
                "filters": ["request_context"],
                "filename": settings.LOG_FILE_PATH.replace(".log", ".json"),
                "maxBytes": max_bytes,
                "backupCount": settings.LOG_BACKUP_COUNT,
                "encoding": "utf-8",
            }
            config["root"]["handlers"].append("json_file")

    return config


def configure_specific_loggers(settings: Optional[Settings] = None) -> None:
    """
    Ajusta niveles por módulo y reduce la verbosidad de librerías externas.
    """
    settings = settings or get_settings()

    # Servicios del dominio
    logging.getLogger("app.services").setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    # Repositorios: solo warnings y errores salvo en debug
    logging.getLogger("app.db").setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.DATABASE_ECHO else logging.WARNING)
    for logger_name in ("httpx", "aiosqlite", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configura el sistema de logging completo de la aplicación.
    """
    settings = settings or get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration(settings))
    configure_specific_loggers(settings)

    logger = logging.getLogger(__name__)
    logger.info(f"Sistema de logging configurado - Nivel: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Logs guardándose en: {settings.LOG_FILE_PATH}")
