"""
CRUD (Create, Read, Update, Delete) operations for the Orders pipeline.

This module contains all database operations for orders, their payment
details, product inventory and the order timeline.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import delete as sqla_delete
import logging
from . import models, schemas
from .exceptions import InvalidStatusTransition
from .validators import validate_order_status_transition

# Set up logging
logger = logging.getLogger(__name__)

def get_order(db: Session, order_id: int) -> Optional[models.Order]:
    """
    Retrieve a single order by ID.

    Args:
        db: Database session
        order_id: ID of the order to retrieve

    Returns:
        Order object or None if not found
    """
    return db.query(models.Order).filter(models.Order.id == order_id).first()

def get_orders(db: Session, skip: int = 0, limit: int = 100) -> List[models.Order]:
    """
    Retrieve a list of orders with pagination.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return

    Returns:
        List of Order objects
    """
    return db.query(models.Order).order_by(models.Order.id).offset(skip).limit(limit).all()

def _to_payment_details(details: Optional[schemas.PaymentDetails]) -> Optional[models.PaymentDetails]:
    if details is None:
        return None
    return models.PaymentDetails(**details.model_dump())

def create_order(db: Session, order: schemas.OrderCreate) -> models.Order:
    """
    Create a new PENDING order in the database.

    NOTE: This function assumes the items have already been checked with
    validate_order_items().

    Args:
        db: Database session
        order: Order data to create

    Returns:
        Created Order object
    """
    db_order = models.Order(
        customer_name=order.customer_name,
        total_amount=order.total_amount,
        status=models.OrderStatus.PENDING.value,
        payment_details=_to_payment_details(order.payment_details),
        items=[models.Item(product_id=item.product_id, quantity=item.quantity) for item in order.items],
    )
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    return db_order

def update_order(db: Session, order_id: int, order: schemas.OrderUpdate) -> Optional[models.Order]:
    """
    Update an existing order.

    Status changes are checked against the allowed transitions; going back
    to PENDING needs reset_order_status().

    Args:
        db: Database session
        order_id: ID of the order to update
        order: Updated order data (only provided fields will be updated)

    Returns:
        Updated Order object or None if not found

    Raises:
        InvalidStatusTransition: If the status change is not allowed
    """
    db_order = get_order(db, order_id)
    if db_order is None:
        return None

    update_data = order.model_dump(exclude_unset=True, exclude={"payment_details"})

    if update_data.get("status") is not None:
        new_status = models.OrderStatus(update_data.pop("status"))
        is_valid, error_message = validate_order_status_transition(db_order.status, new_status)
        if not is_valid:
            logger.warning(f"Order {order_id}: {error_message}")
            raise InvalidStatusTransition(db_order.status, new_status.value)
        db_order.update_status(new_status)

    if "payment_details" in order.model_fields_set:
        db_order.payment_details = _to_payment_details(order.payment_details)

    for key, value in update_data.items():
        if value is not None:
            setattr(db_order, key, value)

    db.commit()
    db.refresh(db_order)
    return db_order

def replace_payment_details(
    db: Session, order_id: int, details: schemas.PaymentDetails
) -> Optional[models.Order]:
    """
    Replace an order's payment details; the old record is deleted.

    Returns:
        Updated Order object or None if not found
    """
    db_order = get_order(db, order_id)
    if db_order is None:
        return None

    db_order.payment_details = _to_payment_details(details)
    db.commit()
    db.refresh(db_order)
    return db_order

def reset_order_status(db: Session, order_id: int) -> Optional[models.Order]:
    """
    Explicitly move an order back to PENDING, whatever its current status.

    Returns:
        Updated Order object or None if not found
    """
    db_order = get_order(db, order_id)
    if db_order is None:
        return None

    db_order.update_status(models.OrderStatus.PENDING)
    db.commit()
    db.refresh(db_order)
    return db_order

def delete_order(db: Session, order_id: int) -> bool:
    """
    Delete an order from the database.

    This also deletes the order's timeline events and payment details.
    Items are only detached from the order.

    Args:
        db: Database session
        order_id: ID of the order to delete

    Returns:
        True if order was deleted, False if not found
    """
    try:
        db_order = get_order(db, order_id)
        if db_order is None:
            return False

        # Delete dependent timeline events first to avoid FK constraint errors
        db.execute(
            sqla_delete(models.OrderEvent).where(models.OrderEvent.order_id == order_id)
        )
        db.flush()

        db.delete(db_order)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete order {order_id}: {e}")
        raise

def get_inventory(db: Session, product_id: int) -> Optional[models.Inventory]:
    """
    Retrieve the inventory record for a product.

    Args:
        db: Database session
        product_id: Product to look up

    Returns:
        Inventory object or None if the product has no stock record
    """
    return db.query(models.Inventory).filter(models.Inventory.product_id == product_id).first()

def get_inventories(db: Session, skip: int = 0, limit: int = 100) -> List[models.Inventory]:
    """Retrieve inventory records with pagination."""
    return db.query(models.Inventory).order_by(models.Inventory.product_id).offset(skip).limit(limit).all()

def create_inventory(db: Session, inventory: schemas.InventoryCreate) -> models.Inventory:
    """
    Create a product's inventory record.

    Args:
        db: Database session
        inventory: Inventory data to create

    Returns:
        Created Inventory object
    """
    db_inventory = models.Inventory(
        product_id=inventory.product_id,
        available_quantity=inventory.available_quantity,
    )
    db.add(db_inventory)
    db.commit()
    db.refresh(db_inventory)
    return db_inventory

def update_inventory(
    db: Session, product_id: int, inventory: schemas.InventoryUpdate
) -> Optional[models.Inventory]:
    """
    Set a product's available quantity.

    Returns:
        Updated Inventory object or None if not found
    """
    db_inventory = get_inventory(db, product_id)
    if db_inventory is None:
        return None

    db_inventory.available_quantity = inventory.available_quantity
    db.commit()
    db.refresh(db_inventory)
    return db_inventory

def log_order_event(
    db: Session,
    order_id: int,
    event_type: str,
    description: str,
    old_value: str = None,
    new_value: str = None,
    user_id: int = None
) -> models.OrderEvent:
    """
    Record an event on the order's timeline.

    Args:
        db: Database session
        order_id: Order identifier
        event_type: Type of event (e.g., "created", "status_changed", "placed")
        description: Human-readable description
        old_value: Previous value (optional)
        new_value: New value (optional)
        user_id: User who triggered the event (optional)
    """
    event = models.OrderEvent(
        order_id=order_id,
        event_type=event_type,
        description=description,
        old_value=old_value,
        new_value=new_value,
        user_id=user_id
    )
    db.add(event)
    db.commit()
    return event

def get_order_events(db: Session, order_id: int) -> List[models.OrderEvent]:
    """Return an order's timeline in chronological order."""
    return db.query(models.OrderEvent).filter(
        models.OrderEvent.order_id == order_id
    ).order_by(models.OrderEvent.created_at.asc(), models.OrderEvent.id.asc()).all()
