"""
Payment strategies.

A payment strategy charges an amount and reports whether the charge went
through. A decline is a normal outcome and returns False; only a missing
strategy or an unknown payment method raises.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
import logging
from . import models
from .clients.payment_gateway import PaymentGateway
from .exceptions import MissingPaymentStrategy, UnsupportedPaymentMethod

logger = logging.getLogger(__name__)


class PaymentStrategy(ABC):
    """Interchangeable way of paying for an order."""

    @abstractmethod
    def pay(self, amount: Decimal) -> bool:
        """Charge ``amount``; return True on success, False on decline."""


class CreditCardPayment(PaymentStrategy):
    """Pays with a credit card through a payment gateway."""

    def __init__(
        self,
        gateway: PaymentGateway,
        card_number: str,
        card_holder_name: Optional[str] = None,
        expiration_date: Optional[str] = None,
        cvv: Optional[str] = None,
    ):
        self.gateway = gateway
        self.card_number = card_number
        self.card_holder_name = card_holder_name
        self.expiration_date = expiration_date
        self.cvv = cvv

    def pay(self, amount: Decimal) -> bool:
        payment_successful = self.gateway.process_credit_card_payment(
            self.card_number, self.card_holder_name, self.expiration_date, self.cvv, amount
        )

        if not payment_successful:
            logger.warning(f"Credit card payment failed for amount: {amount}")
            return False

        logger.info(f"Credit card payment succeeded for amount: {amount}")
        return True


def payment_strategy_for(details: Optional[models.PaymentDetails], gateway: PaymentGateway) -> PaymentStrategy:
    """
    Pick the payment strategy matching an order's payment method.

    Raises:
        UnsupportedPaymentMethod: If the method is missing or unknown
    """
    method = details.payment_method if details is not None else None
    if method and method.strip().upper() == "CREDIT_CARD":
        return CreditCardPayment(
            gateway,
            card_number=details.card_number,
            card_holder_name=details.card_holder_name,
            expiration_date=details.expiration_date,
            cvv=details.cvv,
        )
    raise UnsupportedPaymentMethod(method)


def process_order_payment(amount: Decimal, strategy: Optional[PaymentStrategy]) -> bool:
    """
    Charge an order amount with the given strategy.

    Raises:
        MissingPaymentStrategy: If no strategy was supplied
    """
    if strategy is None:
        raise MissingPaymentStrategy("No payment strategy supplied")
    return strategy.pay(amount)
