"""Turn a cart into a stock-decrement plan plus an immutable sale record.

Nothing here persists. The caller stores ``SaleResult.updated_medicines``
and ``SaleResult.sale_record`` together, or neither.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.utils import timezone

from apps.inventory.domain import Medicine
from apps.inventory.ledger import (
    AllocationPolicy,
    BatchAllocation,
    apply_allocations,
    default_policy,
    plan_decrement,
    pricing_batch,
    sellable_stock,
)
from core.exceptions import InsufficientStockError, NotFoundError, ValidationError

from .domain import PaymentMode, SaleItem, SaleRecord

logger = logging.getLogger(__name__)

AMOUNT_QUANT = Decimal("0.0001")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CartLine:
    medicine_id: str
    quantity: int

    @classmethod
    def from_dict(cls, data) -> CartLine:
        """Read a `{medicineId, quantity}` line; snake_case keys are accepted too."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise ValidationError("Each cart line must be an object.", field="cart")
        medicine_id = data.get("medicineId", data.get("medicine_id"))
        if not medicine_id or "quantity" not in data:
            raise ValidationError("Each cart line needs a medicineId and a quantity.", field="cart")
        return cls(medicine_id=str(medicine_id), quantity=data["quantity"])


@dataclass(frozen=True)
class SaleResult:
    updated_medicines: tuple[Medicine, ...]
    sale_record: SaleRecord
    plan: tuple[BatchAllocation, ...]


def unit_price(medicine: Medicine, amount: Decimal | None) -> Decimal | None:
    """Per-tablet price for strip-priced medicines, per-unit otherwise."""
    if amount is None:
        return None
    if medicine.is_tablet_family:
        amount = amount / Decimal(medicine.tablets_per_strip)
    return amount.quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP)


def _validate_cart(cart, customer_name: str) -> list[CartLine]:
    if not (customer_name or "").strip():
        raise ValidationError("Customer name is required.", field="customerName")
    lines = [CartLine.from_dict(line) for line in cart]
    if not lines:
        raise ValidationError("Add at least one medicine to the bill.", field="cart")
    seen = set()
    for line in lines:
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity <= 0:
            raise ValidationError(
                f"Quantity for {line.medicine_id} must be a positive whole number.", field="quantity"
            )
        if line.medicine_id in seen:
            raise ValidationError(f"Medicine {line.medicine_id} is already on the bill.", field="cart")
        seen.add(line.medicine_id)
    return lines


def _discount(value) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError("Discount must be a number between 0 and 100.", field="discountPercentage")
    try:
        discount = Decimal(str(value or 0))
    except InvalidOperation:
        raise ValidationError("Discount must be a number between 0 and 100.", field="discountPercentage")
    if not discount.is_finite() or discount < 0 or discount > HUNDRED:
        raise ValidationError("Discount must be between 0 and 100 percent.", field="discountPercentage")
    return discount


def complete_sale(
    cart,
    customer_name: str,
    medicines,
    *,
    payment_mode=PaymentMode.CASH,
    doctor_name: str = "",
    discount_percentage=0,
    sale_id: str | None = None,
    now=None,
    policy: AllocationPolicy | None = None,
) -> SaleResult:
    """All-or-nothing sale over a medicine snapshot.

    Every line is priced and checked against sellable stock before anything is
    decremented; if any line is short the error lists each short medicine.
    """
    lines = _validate_cart(cart, customer_name)
    medicines = tuple(medicines)
    if payment_mode not in PaymentMode.values:
        raise ValidationError(f"Unknown payment mode {payment_mode!r}.", field="paymentMode")
    discount = _discount(discount_percentage)
    now = now or timezone.now()
    policy = policy or default_policy()
    by_id = {m.id: m for m in medicines}

    shortages = []
    for line in lines:
        medicine = by_id.get(line.medicine_id)
        if medicine is None:
            raise NotFoundError(f"Medicine {line.medicine_id} not found.")
        available = sellable_stock(medicine, now)
        if line.quantity > available:
            shortages.append(
                {
                    "medicineId": medicine.id,
                    "name": medicine.name,
                    "requested": line.quantity,
                    "available": available,
                }
            )
    if shortages:
        names = ", ".join(s["name"] for s in shortages)
        logger.warning("Sale for %s rejected, insufficient stock: %s", customer_name, names)
        raise InsufficientStockError(f"Insufficient stock for {names}.", shortages=shortages)

    items = []
    plan = []
    updated = dict(by_id)
    for line in lines:
        medicine = by_id[line.medicine_id]
        batch = pricing_batch(medicine, policy, now)
        price_per_unit = unit_price(medicine, batch.price)
        allocations = plan_decrement(medicine, line.quantity, policy=policy, as_of=now)
        updated[medicine.id] = apply_allocations(medicine, allocations)
        plan.extend(allocations)
        items.append(
            SaleItem(
                medicine_id=medicine.id,
                name=medicine.name,
                category=medicine.category,
                quantity=line.quantity,
                price_per_unit=price_per_unit,
                total=(line.quantity * price_per_unit).quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP),
                purchase_price_per_unit=unit_price(medicine, batch.purchase_price),
            )
        )

    subtotal = sum((i.total for i in items), Decimal("0"))
    total_amount = (subtotal - subtotal * discount / HUNDRED).quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP)
    record = SaleRecord(
        id=sale_id or uuid.uuid4().hex,
        customer_name=customer_name.strip(),
        doctor_name=(doctor_name or "").strip(),
        sale_date=now,
        items=tuple(items),
        subtotal=subtotal,
        discount_percentage=discount,
        total_amount=total_amount,
        payment_mode=payment_mode,
    )
    logger.info(
        "Sale %s for %s: %d line(s), total %s (%s)",
        record.id, record.customer_name, len(items), total_amount, record.payment_mode,
    )
    return SaleResult(
        updated_medicines=tuple(updated[m.id] for m in medicines),
        sale_record=record,
        plan=tuple(plan),
    )


def settle_payment(sale: SaleRecord, payment_mode) -> SaleRecord:
    """Record how a credit (Pending) sale was eventually paid."""
    if sale.payment_mode != PaymentMode.PENDING:
        raise ValidationError(f"Sale {sale.id} is already settled ({sale.payment_mode}).", field="paymentMode")
    if payment_mode not in PaymentMode.values or payment_mode == PaymentMode.PENDING:
        raise ValidationError("Settle with Cash, Online or Card.", field="paymentMode")
    return replace(sale, payment_mode=PaymentMode(payment_mode))
