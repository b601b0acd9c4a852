"""
API endpoints para categorías y subcategorías.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.catalog_schemas import CategoryCreate
from app.api.v1.schemas.serializers import serialize_category
from app.db.connection import get_db_session
from app.services.catalog import CategoryService, create_category_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


async def get_category_service(session: AsyncSession = Depends(get_db_session)) -> CategoryService:
    """Dependency para obtener el servicio de categorías de la petición."""
    return create_category_service(session)


@router.get("")
async def list_categories(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    roots_only: bool = Query(False, alias="rootsOnly"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    """Lista categorías por orden y nombre; parentId devuelve sus subcategorías."""
    categories = await service.list(parent_id=parent_id, roots_only=roots_only, is_active=is_active)
    return {"categories": [serialize_category(category) for category in categories]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate, service: CategoryService = Depends(get_category_service)
) -> Dict[str, Any]:
    """Crea una categoría; con parentId se crea como subcategoría."""
    category = await service.create(payload)
    return serialize_category(category)


@router.get("/{category_id}")
async def get_category(category_id: str, service: CategoryService = Depends(get_category_service)) -> Dict[str, Any]:
    category = await service.get(category_id)
    return serialize_category(category)
