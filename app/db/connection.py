# app/db/connection.py
"""
Clase ConnDB para gestión de la conexión a la base de datos relacional.

Esta clase maneja la creación del engine asíncrono, la factoría de
sesiones y el ciclo de vida de las conexiones. Cada petición HTTP usa
una única sesión (una transacción) obtenida con `get_db_session`.
"""

import logging
import time
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.db.base import Base
from app.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite no aplica ON DELETE CASCADE / SET NULL sin este pragma."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ConnDB:
    """
    Clase para gestión exclusiva de conexiones a la base de datos.

    Implementa el patrón Singleton para garantizar un único engine
    compartido por todas las peticiones.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        """Implementa patrón Singleton."""
        if cls._instance is None:
            cls._instance = super(ConnDB, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Inicializa la clase ConnDB."""
        if not self._initialized:
            self.engine: Optional[AsyncEngine] = None
            self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
            self.database_url: Optional[str] = None
            ConnDB._initialized = True
            logger.info("ConnDB instance created")

    async def initialize(self, database_url: Optional[str] = None, create_tables: Optional[bool] = None):
        """
        Inicializa el engine de base de datos y la factoría de sesiones.

        Args:
            database_url: URL de conexión (por defecto DATABASE_URL)
            create_tables: Crear tablas si no existen (por defecto DATABASE_CREATE_TABLES)

        Raises:
            DatabaseException: Si falla la inicialización
        """
        settings = get_settings()

        if self.engine is not None:
            logger.info("Database connection already initialized")
            return

        self.database_url = database_url or settings.DATABASE_URL
        create_tables = settings.DATABASE_CREATE_TABLES if create_tables is None else create_tables

        try:
            logger.info("Initializing database connection...")
            _ensure_sqlite_directory(self.database_url)
            self.engine = build_engine(self.database_url, echo=settings.DATABASE_ECHO)
            self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, autoflush=True)

            if create_tables:
                await create_all_tables(self.engine)

            await self._test_connection()
            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise DatabaseException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialize",
            ) from e

    async def _test_connection(self):
        """Prueba la conexión con una consulta trivial."""
        async with self.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise DatabaseException(message="Connection test returned unexpected value", operation="test")

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Raises:
            DatabaseException: Si no hay conexión inicializada
        """
        if self.session_factory is None:
            raise DatabaseException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
            )
        return self.session_factory()

    def is_initialized(self) -> bool:
        return self.engine is not None and self.session_factory is not None

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        if not self.is_initialized():
            return False
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """Cierra la conexión y libera el pool."""
        logger.info("Closing database connection...")
        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self.session_factory = None

    async def health_check(self) -> dict:
        """
        Realiza un health check de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        start_time = time.time()
        test_passed = await self.test_connection()
        return {
            "connection_initialized": self.is_initialized(),
            "test_passed": test_passed,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
            "dialect": self.engine.dialect.name if self.engine else None,
        }

    def __repr__(self) -> str:
        return f"ConnDB(initialized={self.is_initialized()}, engine={self.engine is not None})"


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Crea un engine asíncrono; para SQLite activa las claves foráneas.

    Las bases SQLite en memoria comparten una única conexión (StaticPool).
    """
    kwargs: dict = {"echo": echo, "future": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_async_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


async def create_all_tables(engine: AsyncEngine) -> None:
    """Crea las tablas que no existan todavía."""
    # Registra los modelos en Base.metadata
    import app.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables ready")


_conn_db_instance = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia singleton de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def initialize_database():
    """Función de conveniencia para inicializar la base de datos."""
    await get_db_connection().initialize()


async def close_database():
    """Función de conveniencia para cerrar la base de datos."""
    await get_db_connection().close()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """
    Dependencia FastAPI: una sesión y una transacción por petición.

    Hace commit al terminar la petición y rollback ante cualquier excepción,
    de modo que un pedido o un reemplazo de variantes se guarda completo o no
    se guarda.
    """
    session = get_db_connection().get_session()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
