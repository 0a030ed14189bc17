"""
Orders Pipeline API

This module implements a FastAPI-based service for managing orders and product
inventory, and for placing orders through the validation pipeline.

Endpoints:
    GET /healthz: Health check endpoint for orchestration systems
    GET /orders: List orders with pagination
    GET /orders/{order_id}: Get a single order by ID
    POST /orders: Create a new PENDING order
    PUT /orders/{order_id}: Update an existing order
    DELETE /orders/{order_id}: Delete an order
    PUT /orders/{order_id}/payment-details: Replace an order's payment details
    POST /orders/{order_id}/place: Validate the order and mark it PLACED
    POST /orders/{order_id}/reset: Move an order back to PENDING
    GET /orders/{order_id}/timeline: Get an order's event history
    GET /inventory: List inventory records
    GET /inventory/{product_id}: Get a product's inventory
    POST /inventory: Create a product's inventory record
    PUT /inventory/{product_id}: Set a product's available quantity

Attributes:
    app (FastAPI): The FastAPI application instance configured with the title "orders-pipeline"
"""
from typing import List, Optional
import logging
import httpx
from fastapi import FastAPI, Depends, HTTPException, status
from sqlalchemy.orm import Session

from . import crud, models, schemas, auth
from .clients.payment_gateway import PaymentGateway, get_payment_gateway
from .commands import PlaceOrderCommand
from .config import LOG_LEVEL
from .database import engine, get_db
from .exceptions import (
    InvalidStatusTransition,
    OrderNotFound,
    PaymentGatewayDeclined,
    UnsupportedPaymentMethod,
    ValidationError,
)
from .payments import payment_strategy_for
from .store import SqlAlchemyOrderStore
from .validators import build_validation_chain, validate_order_items

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="orders-pipeline")


def _get_order_or_404(db: Session, order_id: int) -> models.Order:
    db_order = crud.get_order(db, order_id=order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return db_order


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the orders pipeline service.

    Returns:
        dict: {"status": "healthy"} when the service is operational.
    """
    return {"status": "healthy"}

@app.get("/orders", response_model=List[schemas.Order])
def list_orders(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    List orders with pagination.

    Args:
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100)
    """
    return crud.get_orders(db, skip=skip, limit=limit)

@app.get("/orders/{order_id}", response_model=schemas.Order)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Get a single order by ID.

    Raises:
        HTTPException: 404 if order not found
    """
    return _get_order_or_404(db, order_id)

@app.post("/orders", response_model=schemas.Order, status_code=status.HTTP_201_CREATED)
def create_order(
    order: schemas.OrderCreate,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Create a new order in PENDING status.

    Stock and payment details are not checked here; that happens when the
    order is placed.

    Raises:
        HTTPException: 400 if the items break a business rule
    """
    is_valid, error_message = validate_order_items(order.items)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error_message)

    db_order = crud.create_order(db=db, order=order)
    crud.log_order_event(
        db=db,
        order_id=db_order.id,
        event_type="created",
        description=f"Order created with status '{db_order.status}'",
        new_value=db_order.status,
        user_id=current_user.id
    )
    logger.info(f"Order {db_order.id} created for customer '{db_order.customer_name}'")
    return db_order

@app.put("/orders/{order_id}", response_model=schemas.Order)
def update_order(
    order_id: int,
    order: schemas.OrderUpdate,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Update an existing order.

    Raises:
        HTTPException: 404 if order not found
        HTTPException: 409 if the status change is not allowed
    """
    existing_order = _get_order_or_404(db, order_id)
    old_status = existing_order.status

    try:
        db_order = crud.update_order(db, order_id=order_id, order=order)
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    if db_order.status != old_status:
        crud.log_order_event(
            db=db,
            order_id=order_id,
            event_type="status_changed",
            description=f"Status changed from '{old_status}' to '{db_order.status}'",
            old_value=old_status,
            new_value=db_order.status,
            user_id=current_user.id
        )
    else:
        crud.log_order_event(
            db=db,
            order_id=order_id,
            event_type="updated",
            description="Order details updated",
            user_id=current_user.id
        )

    return db_order

@app.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.require_admin)
):
    """
    Delete an order together with its payment details and timeline (admin only).

    Raises:
        HTTPException: 404 if order not found
    """
    if not crud.delete_order(db, order_id=order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info(f"Order {order_id} deleted")

@app.put("/orders/{order_id}/payment-details", response_model=schemas.Order)
def replace_payment_details(
    order_id: int,
    details: schemas.PaymentDetails,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Replace an order's payment details.

    Raises:
        HTTPException: 404 if order not found
    """
    db_order = crud.replace_payment_details(db, order_id=order_id, details=details)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    crud.log_order_event(
        db=db,
        order_id=order_id,
        event_type="payment_details_replaced",
        description=f"Payment details replaced (method '{details.payment_method}')",
        new_value=details.payment_method,
        user_id=current_user.id
    )
    return db_order

@app.post("/orders/{order_id}/place", response_model=schemas.Order)
def place_order(
    order_id: int,
    request: Optional[schemas.PlaceOrderRequest] = None,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Place an order.

    Runs the inventory and payment-details checks, optionally charges the
    order's payment method, then marks the order PLACED.

    Raises:
        HTTPException: 400 if validation fails or the payment method is unsupported
        HTTPException: 402 if the payment gateway declines the charge
        HTTPException: 404 if order not found
        HTTPException: 409 if the order cannot be placed from its current status
        HTTPException: 503 if the payment gateway is unavailable
    """
    request = request or schemas.PlaceOrderRequest()
    store = SqlAlchemyOrderStore(db)

    strategy_factory = None
    if request.charge:
        strategy_factory = lambda details: payment_strategy_for(details, gateway)

    command = PlaceOrderCommand(
        store, build_validation_chain(store), order_id, strategy_factory=strategy_factory
    )
    try:
        placed = command.execute()
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": type(e).__name__, "reason": e.reason}
        )
    except UnsupportedPaymentMethod as e:
        raise HTTPException(
            status_code=400,
            detail={"error": type(e).__name__, "reason": str(e)}
        )
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except PaymentGatewayDeclined as e:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(e))
    except httpx.HTTPError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Payment gateway communication error: {str(e)}"
        )

    crud.log_order_event(
        db=db,
        order_id=order_id,
        event_type="placed",
        description="Order validated and placed",
        new_value=placed.status,
        user_id=current_user.id
    )
    return placed

@app.post("/orders/{order_id}/reset", response_model=schemas.Order)
def reset_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.require_admin)
):
    """
    Move an order back to PENDING (admin only).

    Raises:
        HTTPException: 404 if order not found
    """
    old_status = _get_order_or_404(db, order_id).status
    db_order = crud.reset_order_status(db, order_id=order_id)

    crud.log_order_event(
        db=db,
        order_id=order_id,
        event_type="status_changed",
        description=f"Status reset from '{old_status}' to '{db_order.status}'",
        old_value=old_status,
        new_value=db_order.status,
        user_id=current_user.id
    )
    return db_order

@app.get("/orders/{order_id}/timeline", response_model=List[schemas.OrderEvent])
def get_order_timeline(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Get the timeline of events for an order.

    Raises:
        HTTPException: 404 if order not found
    """
    _get_order_or_404(db, order_id)
    return crud.get_order_events(db, order_id)

@app.get("/inventory", response_model=List[schemas.Inventory])
def list_inventory(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """List inventory records with pagination."""
    return crud.get_inventories(db, skip=skip, limit=limit)

@app.get("/inventory/{product_id}", response_model=schemas.Inventory)
def get_inventory(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Get a product's inventory.

    Raises:
        HTTPException: 404 if the product has no inventory record
    """
    db_inventory = crud.get_inventory(db, product_id)
    if db_inventory is None:
        raise HTTPException(status_code=404, detail="Inventory not found")
    return db_inventory

@app.post("/inventory", response_model=schemas.Inventory, status_code=status.HTTP_201_CREATED)
def create_inventory(
    inventory: schemas.InventoryCreate,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.require_admin)
):
    """
    Create a product's inventory record (admin only).

    Raises:
        HTTPException: 400 if the product already has one
    """
    if crud.get_inventory(db, inventory.product_id) is not None:
        raise HTTPException(status_code=400, detail="Inventory for this product already exists")
    return crud.create_inventory(db, inventory)

@app.put("/inventory/{product_id}", response_model=schemas.Inventory)
def update_inventory(
    product_id: int,
    inventory: schemas.InventoryUpdate,
    db: Session = Depends(get_db),
    current_user: auth.CurrentUser = Depends(auth.require_admin)
):
    """
    Set a product's available quantity (admin only).

    Raises:
        HTTPException: 404 if the product has no inventory record
    """
    db_inventory = crud.update_inventory(db, product_id, inventory)
    if db_inventory is None:
        raise HTTPException(status_code=404, detail="Inventory not found")
    return db_inventory
