"""
SQLAlchemy ORM models for the Orders pipeline.

Defines the database schema for orders, their items and payment details,
product inventory and the order timeline.
"""
import enum
from datetime import datetime
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship
from .database import Base


class OrderStatus(str, enum.Enum):
    """Lifecycle states of an order."""
    PENDING = "PENDING"
    PLACED = "PLACED"
    CANCELLED = "CANCELLED"


# Items are referenced by orders, not owned: deleting an order only removes
# these association rows.
order_items = Table(
    "order_items",
    Base.metadata,
    Column("order_id", Integer, ForeignKey("customer_order.id"), primary_key=True),
    Column("item_id", Integer, ForeignKey("items.id"), primary_key=True),
)


class PaymentDetails(Base):
    """
    Payment details attached to exactly one order.

    Attributes:
        id (int): Primary key
        payment_method (str): Payment method tag (e.g. "CREDIT_CARD")
        card_number (str): Card number, stored as an opaque string
        card_holder_name (str): Name on the card (optional)
        expiration_date (str): Card expiration, e.g. "12/29" (optional)
        cvv (str): Card verification value (optional)
    """
    __tablename__ = "payment_details"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    payment_method = Column(String, nullable=True)
    card_number = Column(String, nullable=True)
    card_holder_name = Column(String, nullable=True)
    expiration_date = Column(String, nullable=True)
    cvv = Column(String, nullable=True)


class Item(Base):
    """
    Order line item.

    Attributes:
        id (int): Primary key
        product_id (int): Product being ordered
        quantity (int): Requested quantity, always positive
    """
    __tablename__ = "items"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_items_quantity_positive"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)


class Order(Base):
    """
    Order model representing a customer order in the system.

    Attributes:
        id (int): Primary key, auto-incrementing order ID
        customer_name (str): Name of the customer who placed the order
        status (str): One of the OrderStatus values, "PENDING" for new orders
        total_amount (Decimal): Total amount of the order, never negative
        payment_details (PaymentDetails): Owned payment details, deleted with the order
        items (list): Line items in insertion order
        created_at (datetime): Timestamp when the order was created
    """
    __tablename__ = "customer_order"
    __table_args__ = (CheckConstraint("total_amount >= 0", name="ck_order_total_non_negative"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_name = Column(String, nullable=False)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    payment_details_id = Column(Integer, ForeignKey("payment_details.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    payment_details = relationship(
        PaymentDetails,
        cascade="all, delete-orphan",
        single_parent=True,
    )
    items = relationship(Item, secondary=order_items, order_by=Item.id)

    def update_status(self, new_status: OrderStatus) -> None:
        self.status = OrderStatus(new_status).value


class Inventory(Base):
    """
    Stock level of a single product.

    Attributes:
        id (int): Primary key
        product_id (int): Product identifier, unique
        available_quantity (int): Units available, never negative
    """
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="ck_inventory_available_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, unique=True, index=True, nullable=False)
    available_quantity = Column(Integer, nullable=False, default=0)


class OrderEvent(Base):
    """
    OrderEvent model representing historical events in an order's lifecycle.

    Attributes:
        id (int): Primary key, auto-incrementing event ID
        order_id (int): Foreign key to the order
        event_type (str): Type of event (e.g., "created", "status_changed", "placed")
        description (str): Human-readable description of the event
        old_value (str): Previous value (for changes, optional)
        new_value (str): New value (for changes, optional)
        user_id (int): ID of the user who triggered the event (optional)
        created_at (datetime): Timestamp when the event occurred
    """
    __tablename__ = "order_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("customer_order.id"), nullable=False, index=True)
    event_type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    old_value = Column(String, nullable=True)
    new_value = Column(String, nullable=True)
    user_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
