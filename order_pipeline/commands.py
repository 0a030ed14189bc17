"""
Commands acting on orders.

A command bundles an action with everything it needs so that the caller
only has to invoke execute().
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging
from . import models
from .exceptions import InvalidStatusTransition, OrderNotFound, PaymentGatewayDeclined
from .payments import PaymentStrategy, process_order_payment
from .store import OrderStore
from .validators import ValidationChain

logger = logging.getLogger(__name__)


class OrderCommand(ABC):
    @abstractmethod
    def execute(self):
        ...


class PlaceOrderCommand(OrderCommand):
    """
    Validate an order and mark it PLACED.

    Steps:
    1. Look up the order (OrderNotFound if absent).
    2. Make sure the order is PENDING; a placed order is never placed
       (or charged) again.
    3. Run the validation chain; failures propagate unchanged.
    4. If a payment strategy or a strategy factory was given, charge the
       order total (PaymentGatewayDeclined on a decline). A factory is
       called with the order's payment details only after validation.
    5. Set the status to PLACED and save the order.

    The order is only modified and saved in step 5, so a failure in any
    earlier step leaves it untouched.
    """

    def __init__(
        self,
        store: OrderStore,
        chain: ValidationChain,
        order_id: int,
        payment_strategy: Optional[PaymentStrategy] = None,
        strategy_factory: Optional[Callable[[Optional[models.PaymentDetails]], PaymentStrategy]] = None,
    ):
        self.store = store
        self.chain = chain
        self.order_id = order_id
        self.payment_strategy = payment_strategy
        self.strategy_factory = strategy_factory

    def execute(self) -> models.Order:
        order = self.store.find_order(self.order_id)
        if order is None:
            raise OrderNotFound(self.order_id)

        if order.status != models.OrderStatus.PENDING.value:
            logger.warning(f"Order {self.order_id} cannot be placed from status {order.status}")
            raise InvalidStatusTransition(order.status, models.OrderStatus.PLACED.value)

        self.chain.validate(order)

        strategy = self.payment_strategy
        if strategy is None and self.strategy_factory is not None:
            strategy = self.strategy_factory(order.payment_details)
        if strategy is not None:
            if not process_order_payment(order.total_amount, strategy):
                raise PaymentGatewayDeclined(self.order_id, order.total_amount)

        order.update_status(models.OrderStatus.PLACED)
        self.store.save_order(order)

        logger.info(f"Order placed successfully for order ID: {self.order_id}")
        return order
