"""Match received wholesaler order lines against inventory.

Each item is reconciled on its own: a line that needs a brand-new medicine
pauses (``create_new``) without holding back the other lines of the order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from django.db import models
from django.utils import timezone

from apps.inventory.domain import Medicine
from apps.inventory.ledger import increment_stock
from apps.inventory.services import save_medicine
from apps.inventory.units import to_stock_units
from core.exceptions import NotFoundError, ValidationError

from .domain import OrderItem, OrderItemStatus, OrderStatus, WholesalerOrder

logger = logging.getLogger(__name__)


class ReconcileAction(models.TextChoices):
    MERGE = "merge", "Merged into existing medicine"
    CREATE_NEW = "create_new", "Needs new medicine details"
    SKIPPED = "skipped", "Already received"


@dataclass(frozen=True)
class ReconcileOutcome:
    item_id: str
    action: ReconcileAction
    order: WholesalerOrder
    medicine: Medicine | None = None
    stock_delta: int = 0


@dataclass(frozen=True)
class ReconcileBatchResult:
    order: WholesalerOrder
    inventory: tuple[Medicine, ...]
    outcomes: tuple[ReconcileOutcome, ...]


def order_status(items, current: OrderStatus | None = None) -> OrderStatus:
    if current == OrderStatus.CANCELLED:
        return OrderStatus.CANCELLED
    items = list(items)
    received = sum(1 for i in items if i.is_received)
    if items and received == len(items):
        return OrderStatus.COMPLETED
    if received:
        return OrderStatus.PARTIALLY_RECEIVED
    return OrderStatus.PENDING


def _mark_received(order: WholesalerOrder, item_id: str, now) -> WholesalerOrder:
    items = tuple(
        replace(i, status=OrderItemStatus.RECEIVED) if i.id == item_id else i for i in order.items
    )
    status = order_status(items, order.status)
    received_date = order.received_date
    if status == OrderStatus.COMPLETED and received_date is None:
        received_date = now or timezone.now()
    return replace(order, items=items, status=status, received_date=received_date)


def _pending_item(order: WholesalerOrder, item_id: str) -> OrderItem:
    if order.status == OrderStatus.CANCELLED:
        raise ValidationError(f"Order {order.id} is cancelled.", field="status")
    item = order.get_item(item_id)
    if item is None:
        raise NotFoundError(f"Item {item_id} not found on order {order.id}.")
    return item


def match_medicine(item: OrderItem, inventory) -> Medicine | None:
    name, category = item.name.strip().lower(), item.category.strip().lower()
    for medicine in inventory:
        if medicine.name.strip().lower() == name and medicine.category.strip().lower() == category:
            return medicine
    return None


def reconcile_item(order: WholesalerOrder, item_id: str, inventory, *, now=None) -> ReconcileOutcome:
    item = _pending_item(order, item_id)
    if item.is_received:
        return ReconcileOutcome(item_id=item.id, action=ReconcileAction.SKIPPED, order=order)

    medicine = match_medicine(item, inventory)
    if medicine is None or not medicine.batches:
        return ReconcileOutcome(item_id=item.id, action=ReconcileAction.CREATE_NEW, order=order)

    delta = to_stock_units(
        item.quantity,
        medicine.is_tablet_family,
        medicine.tablets_per_strip,
        item.units_per_pack,
    )
    merged = increment_stock(medicine, delta)
    logger.info("Order %s: received %s into %s (+%d)", order.id, item.quantity, medicine.name, delta)
    return ReconcileOutcome(
        item_id=item.id,
        action=ReconcileAction.MERGE,
        order=_mark_received(order, item.id, now),
        medicine=merged,
        stock_delta=delta,
    )


def reconcile_items(order: WholesalerOrder, item_ids, inventory, *, now=None) -> ReconcileBatchResult:
    ids = list(dict.fromkeys(item_ids))
    if not ids:
        raise ValidationError("Select at least one item to receive.", field="itemIds")
    for item_id in ids:
        _pending_item(order, item_id)

    inventory = list(inventory)
    outcomes = []
    for item_id in ids:
        outcome = reconcile_item(order, item_id, inventory, now=now)
        if outcome.action == ReconcileAction.MERGE:
            inventory = [outcome.medicine if m.id == outcome.medicine.id else m for m in inventory]
        order = outcome.order
        outcomes.append(outcome)
    return ReconcileBatchResult(order=order, inventory=tuple(inventory), outcomes=tuple(outcomes))


def receive_as_new_medicine(order: WholesalerOrder, item_id: str, inventory, medicine: Medicine, *, now=None):
    """Finish a ``create_new`` line once full medicine details are known."""
    item = _pending_item(order, item_id)
    if item.is_received:
        raise ValidationError(f"Item {item.name} is already received.", field="status")
    saved = save_medicine(medicine, inventory, confirm_duplicate_name=True, create=True)
    order = _mark_received(order, item.id, now)
    logger.info("Order %s: %s received as new medicine %s", order.id, item.name, saved.medicine.id)
    return order, saved.inventory, saved.medicine
