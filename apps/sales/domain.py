from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.db import models
from django.utils.dateparse import parse_datetime

from apps.inventory.domain import to_decimal, to_int
from core.exceptions import ValidationError


BILL_PREFIX = "VM-"
BILL_PADDING = 5
BILL_NUMBER = re.compile(r"^VM-(\d+)$")


class PaymentMode(models.TextChoices):
    CASH = "Cash", "Cash"
    ONLINE = "Online", "Online"
    CARD = "Card", "Card"
    PENDING = "Pending", "Pending"


@dataclass(frozen=True)
class SaleItem:
    medicine_id: str
    name: str
    category: str
    quantity: int
    price_per_unit: Decimal
    total: Decimal
    purchase_price_per_unit: Decimal | None = None


@dataclass(frozen=True)
class SaleRecord:
    id: str
    customer_name: str
    sale_date: datetime
    items: tuple[SaleItem, ...]
    total_amount: Decimal
    payment_mode: PaymentMode
    doctor_name: str = ""
    subtotal: Decimal | None = None
    discount_percentage: Decimal = Decimal("0")

    def __post_init__(self):
        object.__setattr__(self, "payment_mode", PaymentMode(self.payment_mode))
        if self.subtotal is None:
            object.__setattr__(self, "subtotal", sum((i.total for i in self.items), Decimal("0")))


def next_bill_number(existing_sales) -> str:
    """VM-00001 style: one past the highest bill number issued so far."""
    highest = 0
    for sale in existing_sales:
        match = BILL_NUMBER.match(sale.id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{BILL_PREFIX}{highest + 1:0{BILL_PADDING}d}"


def to_datetime(value, field_name: str) -> datetime:
    if isinstance(value, datetime):
        moment = value
    else:
        moment = parse_datetime(str(value or "").strip()) if value else None
        if moment is None:
            raise ValidationError(f"Invalid date-time for {field_name}: {value!r}", field=field_name)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt_timezone.utc)
    return moment


def sale_item_to_dict(item: SaleItem) -> dict:
    data = {
        "medicineId": item.medicine_id,
        "name": item.name,
        "category": item.category,
        "quantity": item.quantity,
        "pricePerUnit": str(item.price_per_unit),
        "total": str(item.total),
    }
    if item.purchase_price_per_unit is not None:
        data["purchasePricePerUnit"] = str(item.purchase_price_per_unit)
    return data


def sale_item_from_dict(data: dict) -> SaleItem:
    return SaleItem(
        medicine_id=str(data.get("medicineId") or ""),
        name=str(data.get("name") or ""),
        category=str(data.get("category") or ""),
        quantity=to_int(data.get("quantity"), "quantity"),
        price_per_unit=to_decimal(data.get("pricePerUnit"), "pricePerUnit"),
        total=to_decimal(data.get("total"), "total"),
        purchase_price_per_unit=to_decimal(
            data.get("purchasePricePerUnit"), "purchasePricePerUnit", allow_none=True
        ),
    )


def sale_to_dict(sale: SaleRecord) -> dict:
    return {
        "id": sale.id,
        "customerName": sale.customer_name,
        "doctorName": sale.doctor_name,
        "saleDate": sale.sale_date.isoformat(),
        "items": [sale_item_to_dict(i) for i in sale.items],
        "subtotal": str(sale.subtotal),
        "discountPercentage": str(sale.discount_percentage),
        "totalAmount": str(sale.total_amount),
        "paymentMode": sale.payment_mode.value,
    }


def sale_from_dict(data: dict) -> SaleRecord:
    payment_mode = data.get("paymentMode") or PaymentMode.CASH
    if payment_mode not in PaymentMode.values:
        raise ValidationError(f"Unknown payment mode {payment_mode!r}.", field="paymentMode")
    return SaleRecord(
        id=str(data.get("id") or ""),
        customer_name=str(data.get("customerName") or ""),
        doctor_name=str(data.get("doctorName") or ""),
        sale_date=to_datetime(data.get("saleDate"), "saleDate"),
        items=tuple(sale_item_from_dict(i) for i in data.get("items") or []),
        subtotal=to_decimal(data.get("subtotal"), "subtotal", allow_none=True),
        discount_percentage=to_decimal(data.get("discountPercentage") or "0", "discountPercentage"),
        total_amount=to_decimal(data.get("totalAmount"), "totalAmount"),
        payment_mode=payment_mode,
    )
