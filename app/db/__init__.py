"""
Módulo de acceso a la base de datos del catálogo y los pedidos.

- ConnDB: gestión del engine y de las sesiones
- models: tablas ORM
- repositories: operaciones sobre la sesión de cada petición
"""

from app.db.connection import (
    ConnDB,
    close_database,
    get_db_connection,
    get_db_session,
    initialize_database,
)

__all__ = [
    "ConnDB",
    "get_db_connection",
    "get_db_session",
    "initialize_database",
    "close_database",
]
