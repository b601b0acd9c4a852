"""
API endpoints para marcas.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.catalog_schemas import BrandCreate, BrandUpdate
from app.api.v1.schemas.serializers import serialize_brand
from app.db.connection import get_db_session
from app.services.catalog import BrandService, create_brand_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/brands", tags=["Brands"])


async def get_brand_service(session: AsyncSession = Depends(get_db_session)) -> BrandService:
    """Dependency para obtener el servicio de marcas de la petición."""
    return create_brand_service(session)


@router.get("")
async def list_brands(
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
    service: BrandService = Depends(get_brand_service),
) -> Dict[str, Any]:
    """Lista marcas por nombre con su número de productos."""
    brands = await service.list(is_active=is_active, search=search)
    return {"brands": [serialize_brand(brand, count) for brand, count in brands]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_brand(payload: BrandCreate, service: BrandService = Depends(get_brand_service)) -> Dict[str, Any]:
    """Crea una marca. 409 si el nombre ya existe."""
    brand = await service.create(payload)
    return serialize_brand(brand, 0)


@router.get("/{brand_id}")
async def get_brand(brand_id: str, service: BrandService = Depends(get_brand_service)) -> Dict[str, Any]:
    brand, product_count = await service.get(brand_id)
    return serialize_brand(brand, product_count)


@router.put("/{brand_id}")
async def update_brand(
    brand_id: str, payload: BrandUpdate, service: BrandService = Depends(get_brand_service)
) -> Dict[str, Any]:
    """Edición parcial de una marca. 409 si el nuevo nombre pertenece a otra marca."""
    brand = await service.update(brand_id, payload)
    return serialize_brand(brand)


@router.delete("/{brand_id}")
async def delete_brand(brand_id: str, service: BrandService = Depends(get_brand_service)) -> Dict[str, Any]:
    """Elimina una marca sin productos asociados (409 en caso contrario)."""
    await service.delete(brand_id)
    return {"message": "Brand deleted successfully"}
