"""Order pipeline exceptions.

Raised by validators, payment strategies and commands when an order cannot
be placed. None of them is retried; the HTTP layer translates them into
error responses.
"""
from decimal import Decimal
from typing import Optional


class OrderPipelineError(Exception):
    """Base class for all order pipeline errors."""


class OrderNotFound(OrderPipelineError):
    """The requested order does not exist."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order not found with ID: {order_id}")


class ValidationError(OrderPipelineError):
    """A validation step rejected the order and halted the chain."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InsufficientInventory(ValidationError):
    """An item requests more units than its product has available."""

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient inventory for product {product_id}. "
            f"Available: {available}, Requested: {requested}"
        )


class InvalidPayment(ValidationError):
    """Payment details are missing or malformed."""


class PaymentGatewayDeclined(OrderPipelineError):
    """The payment gateway rejected the charge."""

    def __init__(self, order_id: Optional[int], amount: Decimal):
        self.order_id = order_id
        self.amount = amount
        super().__init__(f"Payment of {amount} declined for order: {order_id}")


class InvalidStatusTransition(OrderPipelineError):
    """The order cannot move from its current status to the requested one."""

    def __init__(self, old_status: str, new_status: str):
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(f"Invalid status transition: {old_status} -> {new_status}")


class UnsupportedPaymentMethod(OrderPipelineError):
    """No payment strategy exists for the order's payment method."""

    def __init__(self, payment_method: Optional[str]):
        self.payment_method = payment_method
        super().__init__(f"Unsupported payment method: {payment_method}")


class MissingPaymentStrategy(OrderPipelineError):
    """A payment was requested without a payment strategy."""
