"""
API endpoints para pedidos: alta, consulta, edición parcial y baja.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.order_schemas import OrderCreate, OrderFilters, OrderUpdate
from app.api.v1.schemas.serializers import serialize_order
from app.db.connection import get_db_session
from app.domain.models import OrderStatus, PaymentStatus
from app.services.orders import OrderComposer, create_order_composer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


async def get_order_composer(session: AsyncSession = Depends(get_db_session)) -> OrderComposer:
    """Dependency para obtener el compositor de pedidos de la petición."""
    return create_order_composer(session)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate, composer: OrderComposer = Depends(get_order_composer)) -> Dict[str, Any]:
    """
    Crea un pedido con todas sus líneas en una sola transacción.

    Errores:
    - 400: payload inválido, cliente, dirección o producto inexistente
    - 500: error inesperado

    Returns:
        Pedido creado con cliente, direcciones y líneas con producto/variante
    """
    logger.info(f"🧾 Nuevo pedido para cliente {payload.client_id} ({len(payload.items)} líneas)")
    order = await composer.create(payload)
    return serialize_order(order)


@router.get("")
async def list_orders(
    client_id: Optional[str] = Query(None, alias="clientId"),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    search: Optional[str] = Query(None, description="Número de pedido o nombre del cliente"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    composer: OrderComposer = Depends(get_order_composer),
) -> Dict[str, Any]:
    """Lista pedidos, más recientes primero."""
    filters = OrderFilters(
        client_id=client_id,
        status=order_status,
        payment_status=payment_status,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    orders = await composer.list(filters)
    return {"orders": [serialize_order(order) for order in orders]}


@router.get("/{order_id}")
async def get_order(order_id: str, composer: OrderComposer = Depends(get_order_composer)) -> Dict[str, Any]:
    order = await composer.get(order_id)
    return serialize_order(order)


@router.put("/{order_id}")
async def update_order(
    order_id: str, payload: OrderUpdate, composer: OrderComposer = Depends(get_order_composer)
) -> Dict[str, Any]:
    """
    Edición parcial de un pedido.

    Cualquier importe (envío, impuestos, descuento) recalcula el total a
    partir del subtotal guardado. Las líneas no se modifican.
    """
    logger.info(f"✏️ Actualizando pedido {order_id}")
    order = await composer.update(order_id, payload)
    return serialize_order(order)


@router.delete("/{order_id}")
async def delete_order(order_id: str, composer: OrderComposer = Depends(get_order_composer)) -> Dict[str, Any]:
    await composer.delete(order_id)
    return {"message": "Order deleted successfully"}
