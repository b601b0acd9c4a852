"""
Factories that wire catalog services to a request session.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.db.repositories import BrandRepository, CategoryRepository, ProductRepository
from app.services.catalog.brand_service import BrandService
from app.services.catalog.category_resolver import CategoryResolver
from app.services.catalog.category_service import CategoryService
from app.services.catalog.product_service import ProductService
from app.services.catalog.variant_matrix import VariantMatrixManager
from app.utils.id_utils import IdentifierGenerator, get_identifier_generator


def create_product_service(
    session: AsyncSession,
    settings: Optional[Settings] = None,
    id_generator: Optional[IdentifierGenerator] = None,
) -> ProductService:
    """
    Build a ProductService wired to the given request session.

    Args:
        session: Session (and transaction) of the current request
        settings: Settings to read toggles from (defaults to the global ones)
        id_generator: Identifier generator (defaults to timestamp + random)
    """
    settings = settings or get_settings()
    product_repo = ProductRepository(session)
    return ProductService(
        product_repo=product_repo,
        brand_repo=BrandRepository(session),
        category_resolver=CategoryResolver(
            CategoryRepository(session), enforce_parent=settings.ENFORCE_SUBCATEGORY_PARENT
        ),
        variant_manager=VariantMatrixManager(
            product_repo,
            strategy=settings.VARIANT_UPDATE_STRATEGY,
            strict_colors=settings.STRICT_COLOR_RESOLUTION,
            strict_sizes=settings.STRICT_SIZE_VALIDATION,
        ),
        id_generator=id_generator or get_identifier_generator(),
        max_identifier_attempts=settings.IDENTIFIER_MAX_ATTEMPTS,
    )


def create_brand_service(session: AsyncSession) -> BrandService:
    return BrandService(BrandRepository(session))


def create_category_service(session: AsyncSession) -> CategoryService:
    return CategoryService(CategoryRepository(session))
