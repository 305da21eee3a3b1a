from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from django.utils import timezone

from apps.inventory.domain import (
    Batch,
    MedicineKind,
    StockLevel,
    UNIT_FOR_KIND,
    kind_for_category,
    new_medicine,
    to_date,
    to_decimal,
    to_int,
)
from apps.inventory.ledger import validate_batch
from apps.inventory.units import needs_pack_clarification, parse_leading_number, to_stock_units
from apps.inventory.validators import validate_new_batches
from core.exceptions import ValidationError
from core.stores import ORDERS

from .domain import OrderItem, OrderItemStatus, OrderStatus, WholesalerOrder

logger = logging.getLogger(__name__)


def title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def build_order_item(data: dict) -> OrderItem:
    """Validate one typed or scanned order line into a pending OrderItem."""
    name = title_case(str(data.get("name") or ""))
    category = str(data.get("category") or "").strip()
    quantity = str(data.get("quantity") or "").strip()
    if not name:
        raise ValidationError("Item name is required.", field="name")
    if not category:
        raise ValidationError(f"Category is required for {name}.", field="category")
    if not quantity:
        raise ValidationError(f"Quantity is required for {name}.", field="quantity")
    if parse_leading_number(quantity) <= 0:
        raise ValidationError(f"Quantity for {name} must be positive.", field="quantity")

    units_per_pack = to_int(data.get("unitsPerPack"), "unitsPerPack", allow_none=True)
    unit_name = (data.get("unitName") or "").strip() or None
    needed, default_unit = needs_pack_clarification(quantity, category)
    if needed and units_per_pack is None:
        raise ValidationError(
            f"How many {default_unit} are in one pack of {name}?",
            code="pack_size_required",
            field="unitsPerPack",
            unitName=default_unit,
        )
    if units_per_pack is not None:
        if units_per_pack <= 0:
            raise ValidationError("Units per pack must be a positive whole number.", field="unitsPerPack")
        unit_name = unit_name or default_unit or "units"
    # tablets_per_strip is at least 1, so this is the least stock the line can add
    if to_stock_units(quantity, False, None, units_per_pack) < 1:
        raise ValidationError(f"Quantity for {name} is less than one whole unit.", field="quantity")
    return OrderItem(
        id=str(data.get("id") or "") or uuid.uuid4().hex,
        name=name,
        category=category,
        quantity=quantity,
        units_per_pack=units_per_pack,
        unit_name=unit_name if units_per_pack is not None else None,
        status=OrderItemStatus.PENDING,
    )


def create_order(wholesaler_name: str, items, *, order_id: str | None = None, now=None) -> WholesalerOrder:
    name = (wholesaler_name or "").strip()
    if not name:
        raise ValidationError("Wholesaler name is required.", field="wholesalerName")
    items = [build_order_item(i) for i in items]
    if not items:
        raise ValidationError("Add at least one item to the order.", field="items")
    now = now or timezone.now()
    order = WholesalerOrder(
        id=order_id or f"ORD-{int(now.timestamp() * 1000)}",
        wholesaler_name=name,
        order_date=now,
        items=tuple(items),
        status=OrderStatus.PENDING,
    )
    logger.info("Created order %s for %s with %d item(s)", order.id, name, len(items))
    return order


def cancel_order(order: WholesalerOrder) -> WholesalerOrder:
    if order.status == OrderStatus.COMPLETED:
        raise ValidationError(f"Order {order.id} is already completed.", field="status")
    return replace(order, status=OrderStatus.CANCELLED)


def clear_orders(store) -> int:
    """Remove every wholesaler order through ``store``; returns how many there were."""
    count = len(store.load(ORDERS))
    store.delete_all(ORDERS)
    logger.info("Cleared %d wholesaler order(s)", count)
    return count


def order_items_from_scan(scanned) -> list[OrderItem]:
    """Draft order lines from scanner output; every line is validated like typed input."""
    if not isinstance(scanned, (list, tuple)):
        raise ValidationError("Scanned items must be a list.", field="items")
    return [build_order_item(dict(entry)) for entry in scanned]


def batch_from_scan(details: dict, inventory, *, category: str, stock: int = 0, medicine_id: str | None = None) -> Batch:
    """Validate scanned batch details before they pre-fill a medicine form."""
    kind = kind_for_category(category)
    batch = Batch(
        id=str(details.get("id") or "") or uuid.uuid4().hex,
        batch_number=str(details.get("batchNumber") or "").strip(),
        mfg=to_date(details.get("mfgDate") or details.get("mfg"), "mfgDate"),
        expiry=to_date(details.get("expiryDate") or details.get("expiry"), "expiryDate"),
        price=to_decimal(details.get("price"), "price"),
        stock=StockLevel(unit=UNIT_FOR_KIND[kind], amount=stock),
    )
    holder = new_medicine(
        medicine_id=medicine_id or "",
        name="scan",
        category=category,
        tablets_per_strip=None if kind == MedicineKind.GENERIC else 1,
    )
    validate_batch(holder, batch)
    validate_new_batches([batch], inventory, medicine_id)
    return batch
