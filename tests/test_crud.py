from decimal import Decimal

import pytest

from order_pipeline import crud, models, schemas
from order_pipeline.exceptions import InvalidStatusTransition
from order_pipeline.store import SqlAlchemyOrderStore


def _create(db, items=((1, 2), (2, 1)), card_number="4111111111111111"):
    payment = None
    if card_number is not None:
        payment = schemas.PaymentDetails(payment_method="CREDIT_CARD", card_number=card_number)
    return crud.create_order(db, schemas.OrderCreate(
        customer_name="Grace Hopper",
        total_amount=Decimal("30.00"),
        payment_details=payment,
        items=[schemas.Item(product_id=p, quantity=q) for p, q in items],
    ))


def test_create_order_starts_pending_with_items_in_order(db_session):
    order = _create(db_session, items=[(3, 1), (1, 4), (2, 2)])

    assert order.id is not None
    assert order.status == "PENDING"
    assert [(item.product_id, item.quantity) for item in order.items] == [(3, 1), (1, 4), (2, 2)]
    assert order.payment_details.card_number == "4111111111111111"


def test_update_order_applies_allowed_transition(db_session):
    order = _create(db_session)

    updated = crud.update_order(db_session, order.id, schemas.OrderUpdate(status="CANCELLED", customer_name="G. Hopper"))

    assert updated.status == "CANCELLED"
    assert updated.customer_name == "G. Hopper"


def test_update_order_rejects_backwards_transition(db_session):
    order = _create(db_session)
    crud.update_order(db_session, order.id, schemas.OrderUpdate(status="CANCELLED"))

    with pytest.raises(InvalidStatusTransition):
        crud.update_order(db_session, order.id, schemas.OrderUpdate(status="PENDING"))

    assert crud.get_order(db_session, order.id).status == "CANCELLED"


def test_reset_moves_order_back_to_pending(db_session):
    order = _create(db_session)
    crud.update_order(db_session, order.id, schemas.OrderUpdate(status="CANCELLED"))

    assert crud.reset_order_status(db_session, order.id).status == "PENDING"


def test_update_missing_order_returns_none(db_session):
    assert crud.update_order(db_session, 404, schemas.OrderUpdate(customer_name="x")) is None
    assert crud.reset_order_status(db_session, 404) is None
    assert crud.replace_payment_details(db_session, 404, schemas.PaymentDetails()) is None


def test_replacing_payment_details_deletes_the_old_record(db_session):
    order = _create(db_session, card_number="4000000000000002")
    old_id = order.payment_details.id

    crud.replace_payment_details(
        db_session, order.id, schemas.PaymentDetails(payment_method="CREDIT_CARD", card_number="5555444433331111")
    )

    assert order.payment_details.card_number == "5555444433331111"
    assert db_session.get(models.PaymentDetails, old_id) is None


def test_delete_order_cascades_payment_details_and_events_but_keeps_items(db_session):
    order = _create(db_session)
    order_id = order.id
    payment_id = order.payment_details.id
    item_ids = [item.id for item in order.items]
    crud.log_order_event(db_session, order_id, "created", "Order created")

    assert crud.delete_order(db_session, order_id) is True

    assert crud.get_order(db_session, order_id) is None
    assert db_session.get(models.PaymentDetails, payment_id) is None
    assert crud.get_order_events(db_session, order_id) == []
    assert all(db_session.get(models.Item, item_id) is not None for item_id in item_ids)


def test_delete_missing_order_returns_false(db_session):
    assert crud.delete_order(db_session, 12345) is False


def test_inventory_crud(db_session):
    crud.create_inventory(db_session, schemas.InventoryCreate(product_id=2, available_quantity=3))
    crud.create_inventory(db_session, schemas.InventoryCreate(product_id=1, available_quantity=5))

    assert [record.product_id for record in crud.get_inventories(db_session)] == [1, 2]

    updated = crud.update_inventory(db_session, 2, schemas.InventoryUpdate(available_quantity=10))
    assert updated.available_quantity == 10
    assert crud.update_inventory(db_session, 99, schemas.InventoryUpdate(available_quantity=1)) is None


def test_timeline_is_chronological(db_session):
    order = _create(db_session)
    crud.log_order_event(db_session, order.id, "created", "Order created", new_value="PENDING")
    crud.log_order_event(db_session, order.id, "placed", "Order placed", new_value="PLACED")

    assert [event.event_type for event in crud.get_order_events(db_session, order.id)] == ["created", "placed"]


def test_store_reads_and_saves_through_the_session(db_session):
    order = _create(db_session)
    crud.create_inventory(db_session, schemas.InventoryCreate(product_id=1, available_quantity=5))
    store = SqlAlchemyOrderStore(db_session)

    found = store.find_order(order.id)
    found.update_status(models.OrderStatus.PLACED)
    store.save_order(found)

    assert crud.get_order(db_session, order.id).status == "PLACED"
    assert store.find_inventory(1).available_quantity == 5
    assert store.find_inventory(2) is None
    assert store.find_order(999) is None
