"""
Persistence collaborator used by the order pipeline.

The pipeline only needs three operations, so it depends on the OrderStore
protocol rather than on a database session.
"""
from typing import Optional, Protocol
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from . import crud, models

logger = logging.getLogger(__name__)


class OrderStore(Protocol):
    """Reads and writes the entities the pipeline works on."""

    def find_order(self, order_id: int) -> Optional[models.Order]:
        """Return the order, or None if it does not exist."""
        ...

    def save_order(self, order: models.Order) -> models.Order:
        """Persist the order and return it."""
        ...

    def find_inventory(self, product_id: int) -> Optional[models.Inventory]:
        """Return the product's inventory record, or None."""
        ...


class SqlAlchemyOrderStore:
    """OrderStore backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_order(self, order_id: int) -> Optional[models.Order]:
        return crud.get_order(self.db, order_id)

    def save_order(self, order: models.Order) -> models.Order:
        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save order {order.id}: {e}")
            raise
        self.db.refresh(order)
        return order

    def find_inventory(self, product_id: int) -> Optional[models.Inventory]:
        return crud.get_inventory(self.db, product_id)
