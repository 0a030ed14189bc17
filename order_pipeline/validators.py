"""
Validation for the Orders pipeline.

Provides the order validation chain run before an order is placed, plus the
business-rule checks applied when orders are created or their status changes.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Tuple
import logging
from . import models, schemas
from .exceptions import InsufficientInventory, InvalidPayment

if TYPE_CHECKING:
    from .store import OrderStore

logger = logging.getLogger(__name__)

MAX_ITEMS_PER_ORDER = 100
MAX_ITEM_QUANTITY = 10000


class OrderValidator(ABC):
    """A single step of the validation chain."""

    @abstractmethod
    def validate(self, order: models.Order) -> None:
        """
        Check the order and return normally if it passes.

        Raises:
            ValidationError: If the order fails this step
        """


class InventoryValidator(OrderValidator):
    """Checks that every item's quantity is in stock."""

    def __init__(self, store: "OrderStore"):
        self.store = store

    def validate(self, order: models.Order) -> None:
        for item in order.items:
            logger.debug(f"Checking inventory for product ID: {item.product_id}")
            inventory = self.store.find_inventory(item.product_id)
            available = inventory.available_quantity if inventory is not None else 0
            if item.quantity > available:
                logger.warning(
                    f"Insufficient inventory for order {order.id}: product {item.product_id} "
                    f"requested {item.quantity}, available {available}"
                )
                raise InsufficientInventory(item.product_id, item.quantity, available)

        logger.info(f"Inventory check passed for order: {order.id}")


class PaymentDetailsValidator(OrderValidator):
    """Checks that payment details are present and carry a card number."""

    def validate(self, order: models.Order) -> None:
        details = order.payment_details
        if details is None:
            raise InvalidPayment(f"Payment details missing for order: {order.id}")
        if not details.card_number or not details.card_number.strip():
            raise InvalidPayment(f"Card number missing for order: {order.id}")

        logger.info(f"Payment validation passed for order {order.id} with method: {details.payment_method}")


class ValidationChain:
    """
    Ordered list of validators run one after another.

    The first validator that raises halts the chain; validators after it
    are not called.
    """

    def __init__(self, validators: Iterable[OrderValidator] = ()):
        self.validators: List[OrderValidator] = list(validators)

    def validate(self, order: models.Order) -> None:
        for validator in self.validators:
            validator.validate(order)


def build_validation_chain(store: "OrderStore") -> ValidationChain:
    """Build the standard chain: inventory first, then payment details."""
    return ValidationChain([InventoryValidator(store), PaymentDetailsValidator()])


def validate_order_items(items: List[schemas.Item]) -> Tuple[bool, str]:
    """
    Validate order items for business rules.

    Args:
        items: List of order items

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not items:
        return False, "Order must contain at least one item"

    if len(items) > MAX_ITEMS_PER_ORDER:
        return False, f"Order cannot contain more than {MAX_ITEMS_PER_ORDER} items"

    # Check for duplicate products
    product_ids = [item.product_id for item in items]
    if len(product_ids) != len(set(product_ids)):
        return False, "Order contains duplicate products"

    for item in items:
        if item.quantity <= 0:
            return False, f"Product {item.product_id}: quantity must be positive"

        if item.quantity > MAX_ITEM_QUANTITY:
            return False, f"Product {item.product_id}: quantity exceeds maximum ({MAX_ITEM_QUANTITY})"

    return True, ""


# Going back to PENDING is only possible through an explicit reset.
VALID_TRANSITIONS = {
    models.OrderStatus.PENDING: [models.OrderStatus.PLACED, models.OrderStatus.CANCELLED],
    models.OrderStatus.PLACED: [models.OrderStatus.CANCELLED],
    models.OrderStatus.CANCELLED: [],
}


def validate_order_status_transition(old_status: str, new_status: str) -> Tuple[bool, str]:
    """
    Validate that a status transition is allowed.

    Args:
        old_status: Current order status
        new_status: New order status

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        old = models.OrderStatus(old_status)
    except ValueError:
        return False, f"Unknown status: {old_status}"

    try:
        new = models.OrderStatus(new_status)
    except ValueError:
        return False, f"Unknown status: {new_status}"

    if old == new:
        return True, ""  # No change is valid

    if new not in VALID_TRANSITIONS[old]:
        return False, f"Invalid status transition: {old.value} -> {new.value}"

    return True, ""
