"""
Modelos ORM del catálogo y los pedidos.

Las tablas de clientes y direcciones son de solo lectura para el motor:
se consultan para validar referencias de los pedidos.
"""

from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, IdMixin, TimestampMixin
from app.domain.models import OrderStatus, PaymentMethod, PaymentStatus

MONEY = Numeric(precision=12, scale=2, asdecimal=True)


class Category(IdMixin, TimestampMixin, Base):
    """Categoría del catálogo; las subcategorías tienen parent_id."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(String(500))
    parent_id: Mapped[Optional[str]] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    parent: Mapped[Optional["Category"]] = relationship(remote_side="Category.id", back_populates="children")
    children: Mapped[List["Category"]] = relationship(back_populates="parent")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


class Brand(IdMixin, TimestampMixin, Base):
    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    logo: Mapped[Optional[str]] = mapped_column(String(500))
    website: Mapped[Optional[str]] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    products: Mapped[List["Product"]] = relationship(back_populates="brand")

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name={self.name})>"


class Product(IdMixin, TimestampMixin, Base):
    """
    Producto del catálogo.

    slug y sku son únicos; el sku se genera al crear y no cambia.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(String(200))
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    compare_price: Mapped[Optional[Decimal]] = mapped_column(MONEY)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    slug: Mapped[str] = mapped_column(String(220), unique=True, nullable=False)
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    category_id: Mapped[str] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    brand_id: Mapped[Optional[str]] = mapped_column(ForeignKey("brands.id", ondelete="SET NULL"))

    # Campos de merchandising (se guardan tal cual)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_new_in: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    meta_title: Mapped[Optional[str]] = mapped_column(String(60))
    meta_description: Mapped[Optional[str]] = mapped_column(String(160))
    weight: Mapped[Optional[float]] = mapped_column()
    dimensions: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)

    category: Mapped[Category] = relationship()
    brand: Mapped[Optional[Brand]] = relationship(back_populates="products")
    variants: Mapped[List["ProductVariant"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, sku={self.sku})>"


class ProductVariant(IdMixin, TimestampMixin, Base):
    """Combinación talla/color de un producto; (product_id, size, color) es única."""

    __tablename__ = "product_variants"
    __table_args__ = (
        UniqueConstraint("product_id", "size", "color", name="uq_product_variants_product_size_color"),
        CheckConstraint("stock >= 0", name="ck_product_variants_stock_non_negative"),
    )

    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    size: Mapped[Optional[str]] = mapped_column(String(10))
    color: Mapped[Optional[str]] = mapped_column(String(50))
    color_hex: Mapped[Optional[str]] = mapped_column(String(7))
    material: Mapped[Optional[str]] = mapped_column(String(100))
    sku: Mapped[str] = mapped_column(String(80), nullable=False)
    price: Mapped[Optional[Decimal]] = mapped_column(MONEY)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    product: Mapped[Product] = relationship(back_populates="variants")

    def __repr__(self) -> str:
        return f"<ProductVariant(id={self.id}, sku={self.sku}, size={self.size}, color={self.color})>"


class Client(IdMixin, TimestampMixin, Base):
    __tablename__ = "clients"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(200))

    addresses: Mapped[List["Address"]] = relationship(back_populates="client")


class Address(IdMixin, TimestampMixin, Base):
    __tablename__ = "addresses"

    client_id: Mapped[Optional[str]] = mapped_column(ForeignKey("clients.id", ondelete="SET NULL"))
    street: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[Optional[str]] = mapped_column(String(100))
    postal_code: Mapped[Optional[str]] = mapped_column(String(20))
    country: Mapped[str] = mapped_column(String(100), nullable=False)

    client: Mapped[Optional[Client]] = relationship(back_populates="addresses")


class Order(IdMixin, TimestampMixin, Base):
    """
    Pedido.

    total_amount = subtotal + shipping_cost + tax_amount - discount_amount.
    """

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    client_id: Mapped[str] = mapped_column(ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)
    shipping_address_id: Mapped[str] = mapped_column(
        ForeignKey("addresses.id", ondelete="RESTRICT"), nullable=False
    )
    billing_address_id: Mapped[str] = mapped_column(
        ForeignKey("addresses.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus, native_enum=False, length=20), default=OrderStatus.PENDING, nullable=False
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, native_enum=False, length=20), default=PaymentStatus.PENDING, nullable=False
    )
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(
        SQLEnum(PaymentMethod, native_enum=False, length=20)
    )
    subtotal: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    shipping_cost: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))

    client: Mapped[Client] = relationship()
    shipping_address: Mapped[Address] = relationship(foreign_keys=[shipping_address_id])
    billing_address: Mapped[Address] = relationship(foreign_keys=[billing_address_id])
    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_number={self.order_number}, status={self.status})>"


class OrderItem(IdMixin, TimestampMixin, Base):
    """
    Línea de pedido con snapshot del catálogo.

    product_id / variant_id pasan a NULL si el producto se elimina;
    product_name, product_sku y variant_info se conservan.
    """

    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)

    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id: Mapped[Optional[str]] = mapped_column(ForeignKey("products.id", ondelete="SET NULL"))
    variant_id: Mapped[Optional[str]] = mapped_column(ForeignKey("product_variants.id", ondelete="SET NULL"))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    product_sku: Mapped[str] = mapped_column(String(64), nullable=False)
    variant_info: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Optional[Product]] = relationship()
    variant: Mapped[Optional[ProductVariant]] = relationship()
