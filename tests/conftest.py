"""
Fixtures compartidas: base SQLite en memoria, cliente HTTP y datos de catálogo.

La aplicación se prueba con httpx.AsyncClient + ASGITransport, que no
ejecuta el lifespan; por eso la conexión se inicializa aquí con la misma
ConnDB que usa get_db_session.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.db.connection import get_db_connection
from app.db.models import Address, Brand, Category, Client
from app.main import app
from tests.factories import CatalogSeed, SequenceIdentifierGenerator

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def database():
    """ConnDB inicializada contra una base en memoria con todas las tablas."""
    conn = get_db_connection()
    await conn.initialize(TEST_DATABASE_URL, create_tables=True)
    yield conn
    await conn.close()


@pytest.fixture
async def db_session(database):
    """Sesión directa para preparar datos y verificar lo persistido."""
    async with database.get_session() as session:
        yield session


@pytest.fixture
async def client(database):
    """Cliente HTTP contra la aplicación FastAPI."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def id_generator():
    return SequenceIdentifierGenerator()


@pytest.fixture
async def seed(db_session) -> CatalogSeed:
    """Categoría con subcategoría, otra raíz, una marca, un cliente y dos direcciones."""
    clothing = Category(name="Clothing", slug="clothing")
    shoes = Category(name="Shoes", slug="shoes")
    db_session.add_all([clothing, shoes])
    await db_session.flush()

    tees = Category(name="T-Shirts", slug="t-shirts", parent_id=clothing.id)
    brand = Brand(name="Acme")
    customer = Client(first_name="Ana", last_name="Mora", email="ana@example.com")
    db_session.add_all([tees, brand, customer])
    await db_session.flush()

    shipping = Address(client_id=customer.id, street="Calle 1", city="San José", country="CR")
    billing = Address(client_id=customer.id, street="Avenida 2", city="Heredia", country="CR")
    db_session.add_all([shipping, billing])
    await db_session.commit()

    return CatalogSeed(
        category_id=clothing.id,
        subcategory_id=tees.id,
        other_category_id=shoes.id,
        brand_id=brand.id,
        client_id=customer.id,
        address_id=shipping.id,
        billing_address_id=billing.id,
    )
