"""
Modelos Pydantic para las peticiones de pedidos.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.api.v1.schemas.common import CamelModel
from app.domain.models import OrderStatus, PaymentMethod, PaymentStatus

# Importes por campo; la suma de un pedido se acota en PricingCalculator
MAX_AMOUNT = Decimal("999999.99")
MAX_QUANTITY = 1000


class OrderItemInput(CamelModel):
    """Línea solicitada: producto, variante opcional, cantidad y precio pactado."""

    product_id: str = Field(..., min_length=1)
    variant_id: Optional[str] = None
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY, description="Unidades (entero entre 1 y 1000)")
    unit_price: Decimal = Field(..., ge=0, le=MAX_AMOUNT, description="Precio unitario al momento del pedido")


class OrderCreate(CamelModel):
    client_id: str = Field(..., min_length=1)
    items: list[OrderItemInput] = Field(..., min_length=1)
    shipping_address_id: str = Field(..., min_length=1)
    billing_address_id: str = Field(..., min_length=1)
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(None, max_length=500)


class OrderUpdate(CamelModel):
    """Edición parcial; los ítems, el cliente y las direcciones no se modifican."""

    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    shipping_cost: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    tax_amount: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    discount_amount: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    notes: Optional[str] = Field(None, max_length=500)


class OrderFilters(CamelModel):
    client_id: Optional[str] = None
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
