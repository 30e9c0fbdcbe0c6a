# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class CartItemIn(BaseModel):
    """Schema dla dodawania wariantu produktu do koszyka."""

    variant_id: int = Field(..., gt=0, description="ID wariantu produktu")
    quantity: int = Field(..., gt=0, description="Ilosc (musi byc > 0)")


class CartItemOut(BaseModel):
    cart_item_id: int
    variant_id: int
    product_name: str
    gender: str
    size: str
    quantity: int
    available_quantity: int
    price: Decimal


class CartOut(BaseModel):
    cart_id: int | None = None
    account_id: int
    items: List[CartItemOut]


class SelectionIn(BaseModel):
    """Wybrane pozycje koszyka do wyceny lub zamowienia."""

    cart_item_ids: List[int] = Field(default_factory=list)


class OrderCreate(SelectionIn):
    note: str | None = Field(default=None, max_length=500)


class ResolvedLineOut(BaseModel):
    cart_item_id: int
    variant_id: int
    requested_quantity: int
    available_quantity: int
    unit_price: Decimal
    product_name: str
    size: str

    model_config = ConfigDict(from_attributes=True)


class SnapshotOut(BaseModel):
    """Podglad zamowienia (cart snapshot)."""

    lines: List[ResolvedLineOut]
    total_quantity: int
    subtotal: Decimal
    delivery_fee: Decimal
    total_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderCreated(BaseModel):
    order_id: int
    status: str
    total_amount: Decimal
    delivery_fee: Decimal


class OrderItemOut(BaseModel):
    id: int
    variant_id: int
    product_name: str | None = None
    size: str | None = None
    gender: str | None = None
    quantity: int
    price_at_purchase: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    account_id: int
    username: str | None = None
    email: str | None = None
    status: str
    total_amount: Decimal
    delivery_fee: Decimal
    note: str | None = None
    created_at: datetime
    prepared_at: datetime | None = None
    prepared_by: int | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancel_reason: str | None = None
    cancelled_at: datetime | None = None
    items: List[OrderItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ShipIn(BaseModel):
    tracking_number: str = ""
    carrier: str = ""


class CancelIn(BaseModel):
    cancel_reason: str = ""


class TransitionOut(BaseModel):
    order_id: int
    status: str
