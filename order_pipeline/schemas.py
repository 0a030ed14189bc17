"""
Pydantic schemas for request/response validation in the Orders pipeline.

These schemas define the structure of data for API requests and responses.
"""
from datetime import datetime
from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator

from .models import OrderStatus


class Item(BaseModel):
    """Schema for an order line item."""
    product_id: int = Field(..., description="Product identifier from inventory")
    quantity: int = Field(..., gt=0, description="Quantity ordered")

    class Config:
        from_attributes = True


class PaymentDetails(BaseModel):
    """Schema for the payment details attached to an order."""
    payment_method: Optional[str] = Field(None, description="Payment method tag, e.g. CREDIT_CARD")
    card_number: Optional[str] = None
    card_holder_name: Optional[str] = None
    expiration_date: Optional[str] = None
    cvv: Optional[str] = None


class PaymentDetailsOut(BaseModel):
    """Payment details as returned to clients; the card number is masked."""
    payment_method: Optional[str] = None
    card_number: Optional[str] = None

    @field_validator("card_number")
    @classmethod
    def mask_card_number(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        return "*" * max(len(value) - 4, 0) + value[-4:]

    class Config:
        from_attributes = True


class OrderCreate(BaseModel):
    """Schema for creating a new order. New orders always start PENDING."""
    customer_name: str = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0)
    payment_details: Optional[PaymentDetails] = None
    items: List[Item] = Field(default_factory=list, description="Order line items")


class OrderUpdate(BaseModel):
    """Schema for updating an existing order. All fields are optional."""
    customer_name: Optional[str] = Field(None, min_length=1)
    total_amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[OrderStatus] = None
    payment_details: Optional[PaymentDetails] = None


class PlaceOrderRequest(BaseModel):
    """Options for placing an order."""
    charge: bool = Field(False, description="Charge the order's payment method before placing it")


class Order(BaseModel):
    """
    Schema for order responses, includes all database fields.

    Attributes:
        id (int): Order's unique identifier
        customer_name (str): Customer who placed the order
        status (str): Order status
        total_amount (Decimal): Total amount of the order
        payment_details (PaymentDetailsOut): Masked payment details, if any
        items (List[Item]): Order line items
        created_at (datetime): When the order was created
    """
    id: int
    customer_name: str
    status: str
    total_amount: Decimal
    payment_details: Optional[PaymentDetailsOut] = None
    items: List[Item] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryCreate(BaseModel):
    """Schema for creating a product's inventory record."""
    product_id: int
    available_quantity: int = Field(..., ge=0)


class InventoryUpdate(BaseModel):
    """Schema for changing a product's available quantity."""
    available_quantity: int = Field(..., ge=0)


class Inventory(InventoryCreate):
    """Schema for inventory responses."""
    id: int

    class Config:
        from_attributes = True


class OrderEvent(BaseModel):
    """
    Schema for order timeline events.

    Attributes:
        id (int): Event ID
        order_id (int): Order identifier
        event_type (str): Type of event (created, status_changed, updated, placed)
        description (str): Human-readable event description
        old_value (str): Previous value (optional)
        new_value (str): New value (optional)
        user_id (int): User who triggered the event (optional)
        created_at (datetime): When the event occurred
    """
    id: int
    order_id: int
    event_type: str
    description: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
