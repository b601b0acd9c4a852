"""
Modelos Pydantic para las peticiones del catálogo (productos, marcas, categorías).
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field, HttpUrl, field_validator

from app.api.v1.schemas.common import CamelModel


class VariantInput(CamelModel):
    """Fila de la matriz talla/color enviada por el cliente."""

    size: Optional[str] = Field(None, max_length=10, description="Talla (XS, S, M, L, XL, XXL)")
    color: Optional[str] = Field(None, max_length=50, description="Nombre del color")
    quantity: int = Field(default=0, ge=0, description="Stock inicial de la variante")

    @field_validator("size", "color", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        """Cadenas vacías equivalen a campo ausente."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Dimensions(CamelModel):
    length: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)


class ProductBase(CamelModel):
    """Campos de merchandising compartidos por alta y edición."""

    short_description: Optional[str] = Field(None, max_length=200)
    compare_price: Optional[Decimal] = Field(None, ge=0, le=Decimal("999999.99"), decimal_places=2)
    tags: Optional[list[str]] = None
    featured: Optional[bool] = None
    is_new_in: Optional[bool] = None
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)
    weight: Optional[float] = Field(None, ge=0)
    dimensions: Optional[Dimensions] = None


class ProductCreate(ProductBase):
    """Payload de alta de producto; sku y slug los genera el servidor."""

    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10, max_length=1000)
    price: Decimal = Field(..., gt=0, le=Decimal("999999.99"), decimal_places=2)
    images: list[str] = Field(..., min_length=1, description="URLs de imágenes (al menos una)")
    category_id: str = Field(..., min_length=1)
    subcategory_id: Optional[str] = None
    brand_id: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    available: bool = True
    variants: list[VariantInput] = Field(default_factory=list)


class ProductUpdate(ProductBase):
    """Payload de edición parcial; el sku nunca cambia."""

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    price: Optional[Decimal] = Field(None, gt=0, le=Decimal("999999.99"), decimal_places=2)
    images: Optional[list[str]] = Field(None, min_length=1)
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    brand_id: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    available: Optional[bool] = None
    variants: Optional[list[VariantInput]] = None


class ProductSearchParams(CamelModel):
    q: str = Field(..., min_length=1)
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[str] = None
    available: Optional[bool] = None
    sort_by: str = Field(default="createdAt", pattern="^(createdAt|price|name)$")
    sort_order: str = Field(default="desc", pattern="^(asc|desc)$")


class BrandCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    logo: Optional[HttpUrl] = None
    website: Optional[HttpUrl] = None
    is_active: bool = True


class BrandUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    logo: Optional[HttpUrl] = None
    website: Optional[HttpUrl] = None
    is_active: Optional[bool] = None


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True
    sort_order: int = Field(default=0, ge=0, le=9999)
