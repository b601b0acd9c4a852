"""
API endpoints para productos del catálogo y su matriz de variantes.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.catalog_schemas import ProductCreate, ProductSearchParams, ProductUpdate
from app.api.v1.schemas.serializers import serialize_product, serialize_variant
from app.db.connection import get_db_session
from app.services.catalog import ProductService, create_product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


async def get_product_service(session: AsyncSession = Depends(get_db_session)) -> ProductService:
    """Dependency para obtener el servicio de productos de la petición."""
    return create_product_service(session)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate, service: ProductService = Depends(get_product_service)
) -> Dict[str, Any]:
    """
    Crea un producto con sku y slug generados y su matriz de variantes.

    Returns:
        Producto creado con categoría, marca, variantes y agregados de stock
    """
    logger.info(f"🛍️ Creando producto: {payload.name}")
    product = await service.create(payload)
    return serialize_product(product)


@router.get("")
async def list_products(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    available: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Texto en nombre o descripción"),
    service: ProductService = Depends(get_product_service),
) -> Dict[str, Any]:
    """Lista productos, más recientes primero."""
    products = await service.list(category_id=category_id, available=available, search=search)
    return {"products": [serialize_product(product) for product in products]}


@router.get("/search")
async def search_products(
    q: str = Query(..., min_length=1, description="Texto a buscar"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    available: Optional[bool] = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy", pattern="^(createdAt|price|name)$"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    service: ProductService = Depends(get_product_service),
) -> Dict[str, Any]:
    """
    Búsqueda de productos con filtros de precio, categoría y disponibilidad.

    Args:
        q: Texto a buscar en nombre, descripción o sku
        sort_by: createdAt, price o name
        sort_order: asc o desc
    """
    params = ProductSearchParams(
        q=q,
        min_price=min_price,
        max_price=max_price,
        category_id=category_id,
        available=available,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    products = await service.search(params)
    return {"products": [serialize_product(product) for product in products], "total": len(products)}


@router.get("/{product_id}")
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)) -> Dict[str, Any]:
    """Producto con sus variantes activas (por talla y color) y estadísticas."""
    product, variants, stats = await service.get(product_id)
    return serialize_product(product, variants=variants, stats=stats)


@router.put("/{product_id}")
async def update_product(
    product_id: str, payload: ProductUpdate, service: ProductService = Depends(get_product_service)
) -> Dict[str, Any]:
    """
    Edición parcial de un producto.

    El slug se regenera solo si cambia el nombre; el sku no cambia nunca.
    Una lista de variantes no vacía se aplica según la estrategia configurada.
    """
    logger.info(f"✏️ Actualizando producto {product_id}")
    product = await service.update(product_id, payload)
    return serialize_product(product)


@router.delete("/{product_id}")
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)) -> Dict[str, Any]:
    """Elimina un producto y sus variantes; las líneas de pedido conservan su snapshot."""
    await service.delete(product_id)
    return {"message": "Product deleted successfully"}


@router.get("/{product_id}/variants")
async def list_product_variants(
    product_id: str, service: ProductService = Depends(get_product_service)
) -> Dict[str, Any]:
    """Todas las variantes de un producto, activas o no."""
    variants = await service.list_variants(product_id)
    return {"variants": [serialize_variant(variant) for variant in variants]}
