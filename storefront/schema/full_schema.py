import enum
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, Text
from uuid6 import uuid7
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlmodel import Column, SQLModel, Field, String
from storefront.common.utils import now


def new_public_id() -> str:
    return str(uuid7())


class UserRole(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    MERCHANT = "MERCHANT"


class Users(SQLModel, table=True):
    # string id , callers pass it back as `usuarioId`
    id: str = Field(default_factory=new_public_id,
        sa_column=Column(String(36), primary_key=True))
    name: str = Field(sa_column=Column(String(128), nullable=False))
    email: str = Field(sa_column=Column(String(320), nullable=False, unique=True, index=True))
    password_hash: str = Field(sa_column=Column(Text(), nullable=False))
    role: UserRole = Field(sa_column=Column(String(16), nullable=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"),
            unique=True, index=True, nullable=False))
    address: str = Field(sa_column=Column(Text(), nullable=False))


class Merchant(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"),
            unique=True, index=True, nullable=False))
    company_name: str = Field(sa_column=Column(String(255), nullable=False))


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(120), nullable=False, unique=True))
    description: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))


class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False, unique=True))
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    category_id: int = Field(sa_column=Column(ForeignKey("category.id"), index=True, nullable=False))
    merchant_id: int = Field(sa_column=Column(ForeignKey("merchant.id"), index=True, nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    active: bool = Field(default=True, sa_column=Column(Boolean(), nullable=False, default=True))
    stock: int = Field(default=0, sa_column=Column(Integer(), nullable=False, default=0))
    colors: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))
    sizes: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))
    # flat "{color}-{size}" -> units map , null for products without variant tracking
    stock_by_variant: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class ProductImage(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(sa_column=Column(ForeignKey("product.id", ondelete="CASCADE"), index=True, nullable=False))
    url: str = Field(sa_column=Column(String(1024), nullable=False))
    sort_order: int = Field(default=0, sa_column=Column(Integer(), nullable=False, default=0))


class Cart(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(sa_column=Column(ForeignKey("customer.id", ondelete="CASCADE"), index=True, nullable=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class CartItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(sa_column=Column(ForeignKey("cart.id", ondelete="CASCADE"), index=True, nullable=False))
    product_id: int = Field(sa_column=Column(ForeignKey("product.id"), index=True, nullable=False))
    quantity: int = Field(default=1, sa_column=Column(Integer(), nullable=False, default=1))
    selected_color: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    selected_size: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))


class OrderStatus(str, enum.Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PENDING_SHIPMENT = "PENDING_SHIPMENT"
    # set on payment confirmation , the name predates a separate "paid" state
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"


class Orders(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(sa_column=Column(ForeignKey("customer.id"), index=True, nullable=False))
    merchant_id: int = Field(sa_column=Column(ForeignKey("merchant.id"), index=True, nullable=False))
    status: OrderStatus = Field(default=OrderStatus.PENDING_PAYMENT,
        sa_column=Column(String(32), nullable=False, default=OrderStatus.PENDING_PAYMENT.value))
    # frozen copy of the delivery address , later profile edits never touch it
    shipping_address: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(sa_column=Column(ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False))
    product_id: int = Field(sa_column=Column(ForeignKey("product.id"), index=True, nullable=False))
    quantity: int = Field(sa_column=Column(Integer(), nullable=False))
    unit_price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    selected_color: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    selected_size: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELED = "CANCELED"


class Payment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(sa_column=Column(ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False))
    customer_id: int = Field(sa_column=Column(ForeignKey("customer.id"), index=True, nullable=False))
    amount: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    status: PaymentStatus = Field(default=PaymentStatus.PENDING,
        sa_column=Column(String(16), nullable=False, default=PaymentStatus.PENDING.value))
    payment_type: str = Field(sa_column=Column(String(32), nullable=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))

