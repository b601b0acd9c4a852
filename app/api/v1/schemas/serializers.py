"""
Serialización de las filas ORM a JSON camelCase.

Los importes se devuelven como números con dos decimales y las fechas en
ISO 8601, igual que los payloads que consume el panel de administración.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence

from app.db.models import Address, Brand, Category, Client, Order, OrderItem, Product, ProductVariant
from app.services.catalog.variant_matrix import VariantStats, compute_variant_stats


def _amount(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _date(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _enum(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _timestamps(row: Any) -> dict[str, Any]:
    return {"createdAt": _date(row.created_at), "updatedAt": _date(row.updated_at)}


# === CATÁLOGO ===


def serialize_category(category: Category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "parentId": category.parent_id,
        "image": category.image,
        "isActive": category.is_active,
        "sortOrder": category.sort_order,
        **_timestamps(category),
    }


def serialize_brand(brand: Brand, product_count: Optional[int] = None) -> dict[str, Any]:
    data = {
        "id": brand.id,
        "name": brand.name,
        "description": brand.description,
        "logo": brand.logo,
        "website": brand.website,
        "isActive": brand.is_active,
        **_timestamps(brand),
    }
    if product_count is not None:
        data["_count"] = {"products": product_count}
    return data


def serialize_variant(variant: ProductVariant) -> dict[str, Any]:
    return {
        "id": variant.id,
        "productId": variant.product_id,
        "size": variant.size,
        "color": variant.color,
        "colorHex": variant.color_hex,
        "material": variant.material,
        "sku": variant.sku,
        "price": _amount(variant.price),
        "stock": variant.stock,
        "images": variant.images or [],
        "isActive": variant.is_active,
    }


def serialize_product(
    product: Product,
    variants: Optional[Sequence[ProductVariant]] = None,
    stats: Optional[VariantStats] = None,
) -> dict[str, Any]:
    """
    Producto con categoría, marca y variantes.

    Args:
        product: Producto con sus asociaciones cargadas
        variants: Variantes a exponer (por defecto todas las del producto)
        stats: Agregados a incluir bajo "stats"; se calculan si no se pasan
    """
    variants = list(product.variants) if variants is None else list(variants)
    stats = stats or compute_variant_stats(variants)
    category = product.category
    brand = product.brand
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "shortDescription": product.short_description,
        "price": _amount(product.price),
        "comparePrice": _amount(product.compare_price),
        "stock": product.stock,
        "images": product.images or [],
        "slug": product.slug,
        "sku": product.sku,
        "available": product.available,
        "featured": product.featured,
        "isNewIn": product.is_new_in,
        "tags": product.tags or [],
        "metaTitle": product.meta_title,
        "metaDescription": product.meta_description,
        "weight": product.weight,
        "dimensions": product.dimensions,
        "categoryId": product.category_id,
        "brandId": product.brand_id,
        "category": {"id": category.id, "name": category.name, "slug": category.slug} if category else None,
        "brand": {"id": brand.id, "name": brand.name, "logo": brand.logo} if brand else None,
        "variants": [serialize_variant(variant) for variant in variants],
        "stats": stats.to_dict(),
        **_timestamps(product),
    }


# === PEDIDOS ===


def _client(client: Optional[Client]) -> Optional[dict[str, Any]]:
    if client is None:
        return None
    return {
        "id": client.id,
        "firstName": client.first_name,
        "lastName": client.last_name,
        "phone": client.phone,
        "email": client.email,
    }


def _address(address: Optional[Address]) -> Optional[dict[str, Any]]:
    if address is None:
        return None
    return {
        "id": address.id,
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "postalCode": address.postal_code,
        "country": address.country,
    }


def serialize_order_item(item: OrderItem) -> dict[str, Any]:
    """Línea de pedido; product/variant son datos vivos, el resto es snapshot."""
    product = item.product
    variant = item.variant
    return {
        "id": item.id,
        "productId": item.product_id,
        "variantId": item.variant_id,
        "quantity": item.quantity,
        "unitPrice": _amount(item.unit_price),
        "totalPrice": _amount(item.total_price),
        "productName": item.product_name,
        "productSku": item.product_sku,
        "variantInfo": item.variant_info,
        "product": (
            {"id": product.id, "name": product.name, "images": product.images or [], "sku": product.sku}
            if product
            else None
        ),
        "variant": (
            {"id": variant.id, "size": variant.size, "color": variant.color, "colorHex": variant.color_hex}
            if variant
            else None
        ),
    }


def serialize_order(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "clientId": order.client_id,
        "shippingAddressId": order.shipping_address_id,
        "billingAddressId": order.billing_address_id,
        "status": _enum(order.status),
        "paymentStatus": _enum(order.payment_status),
        "paymentMethod": _enum(order.payment_method),
        "subtotal": _amount(order.subtotal),
        "shippingCost": _amount(order.shipping_cost),
        "taxAmount": _amount(order.tax_amount),
        "discountAmount": _amount(order.discount_amount),
        "totalAmount": _amount(order.total_amount),
        "notes": order.notes,
        "client": _client(order.client),
        "shippingAddress": _address(order.shipping_address),
        "billingAddress": _address(order.billing_address),
        "items": [serialize_order_item(item) for item in order.items],
        **_timestamps(order),
    }
