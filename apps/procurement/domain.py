from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from django.db import models

from apps.inventory.domain import to_int
from apps.sales.domain import to_datetime
from core.exceptions import ValidationError


class OrderItemStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    RECEIVED = "Received", "Received"


class OrderStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    PARTIALLY_RECEIVED = "PartiallyReceived", "Partially received"
    COMPLETED = "Completed", "Completed"
    CANCELLED = "Cancelled", "Cancelled"


@dataclass(frozen=True)
class OrderItem:
    id: str
    name: str
    category: str
    quantity: str
    units_per_pack: int | None = None
    unit_name: str | None = None
    status: OrderItemStatus = OrderItemStatus.PENDING

    def __post_init__(self):
        object.__setattr__(self, "status", OrderItemStatus(self.status))

    @property
    def is_received(self) -> bool:
        return self.status == OrderItemStatus.RECEIVED


@dataclass(frozen=True)
class WholesalerOrder:
    id: str
    wholesaler_name: str
    order_date: datetime
    items: tuple[OrderItem, ...]
    status: OrderStatus = OrderStatus.PENDING
    received_date: datetime | None = None

    def __post_init__(self):
        object.__setattr__(self, "status", OrderStatus(self.status))

    def get_item(self, item_id: str) -> OrderItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


def order_item_to_dict(item: OrderItem) -> dict:
    data = {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "quantity": item.quantity,
        "status": item.status.value,
    }
    if item.units_per_pack is not None:
        data["unitsPerPack"] = item.units_per_pack
    if item.unit_name:
        data["unitName"] = item.unit_name
    return data


def order_item_from_dict(data: dict) -> OrderItem:
    status = data.get("status") or OrderItemStatus.PENDING
    if status not in OrderItemStatus.values:
        raise ValidationError(f"Unknown item status {status!r}.", field="status")
    return OrderItem(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or "").strip(),
        category=str(data.get("category") or "").strip(),
        quantity=str(data.get("quantity") or "").strip(),
        units_per_pack=to_int(data.get("unitsPerPack"), "unitsPerPack", allow_none=True),
        unit_name=(data.get("unitName") or None),
        status=status,
    )


def order_to_dict(order: WholesalerOrder) -> dict:
    data = {
        "id": order.id,
        "wholesalerName": order.wholesaler_name,
        "orderDate": order.order_date.isoformat(),
        "items": [order_item_to_dict(i) for i in order.items],
        "status": order.status.value,
    }
    if order.received_date is not None:
        data["receivedDate"] = order.received_date.isoformat()
    return data


def order_from_dict(data: dict) -> WholesalerOrder:
    status = data.get("status") or OrderStatus.PENDING
    if status not in OrderStatus.values:
        raise ValidationError(f"Unknown order status {status!r}.", field="status")
    received = data.get("receivedDate")
    return WholesalerOrder(
        id=str(data.get("id") or ""),
        wholesaler_name=str(data.get("wholesalerName") or "").strip(),
        order_date=to_datetime(data.get("orderDate"), "orderDate"),
        items=tuple(order_item_from_dict(i) for i in data.get("items") or []),
        status=status,
        received_date=to_datetime(received, "receivedDate") if received else None,
    )
