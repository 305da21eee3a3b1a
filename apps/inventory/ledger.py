"""Per-medicine batch stock: validation, allocation and adjustment.

All functions return new ``Medicine`` snapshots. Stock never goes negative:
a request that would overdraw raises ``InsufficientStockError`` instead.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone

from django.conf import settings
from django.db import models

from core.exceptions import InsufficientStockError, NotFoundError, ValidationError

from .domain import Batch, Medicine, MedicineKind


LOW_STOCK_TABLETS = 50
LOW_STOCK_UNITS = 10


class AllocationPolicy(models.TextChoices):
    FEFO = "FEFO", "First expiry, first out"
    FIFO = "FIFO", "First in, first out"


@dataclass(frozen=True)
class BatchAllocation:
    medicine_id: str
    batch_id: str
    amount: int


def default_policy() -> AllocationPolicy:
    return AllocationPolicy(getattr(settings, "PHARMACY_STOCK_ALLOCATION", AllocationPolicy.FEFO))


def utc_date(value) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def days_until_expiry(batch: Batch, as_of) -> int:
    """Whole UTC calendar days from ``as_of`` to expiry; negative once expired."""
    return (utc_date(batch.expiry) - utc_date(as_of)).days


def is_expired(batch: Batch, as_of) -> bool:
    return days_until_expiry(batch, as_of) < 0


def total_stock(medicine: Medicine) -> int:
    return sum(b.stock.amount for b in medicine.batches)


def sellable_stock(medicine: Medicine, as_of=None) -> int:
    return sum(b.stock.amount for b in _sellable_batches(medicine, as_of))


def is_low_stock(medicine: Medicine) -> bool:
    total = total_stock(medicine)
    if medicine.kind == MedicineKind.TABLET:
        return 0 < total < LOW_STOCK_TABLETS
    if medicine.kind == MedicineKind.GENERIC:
        return 0 < total < LOW_STOCK_UNITS
    raise ValidationError(f"Unknown medicine kind {medicine.kind!r}.")


def is_out_of_stock(medicine: Medicine) -> bool:
    return total_stock(medicine) <= 0


def soonest_expiry(medicine: Medicine) -> date | None:
    if not medicine.batches:
        return None
    return min(b.expiry for b in medicine.batches)


def validate_batch(medicine: Medicine, batch: Batch) -> None:
    if batch.expiry <= batch.mfg:
        raise ValidationError(
            f"Batch {batch.batch_number}: expiry date must be after manufacturing date.",
            field="expiry",
        )
    if batch.stock.unit != medicine.stock_unit:
        raise ValidationError(
            f"Batch {batch.batch_number}: stock must be counted in {medicine.stock_unit.label.lower()}.",
            field="stock",
        )
    if batch.stock.amount < 0:
        raise ValidationError(f"Batch {batch.batch_number}: stock cannot be negative.", field="stock")
    if batch.price <= 0:
        raise ValidationError(f"Batch {batch.batch_number}: price must be positive.", field="price")
    if batch.purchase_price is not None and batch.purchase_price < 0:
        raise ValidationError(
            f"Batch {batch.batch_number}: purchase price cannot be negative.", field="purchasePrice"
        )


def add_batch(medicine: Medicine, batch: Batch) -> Medicine:
    validate_batch(medicine, batch)
    if medicine.get_batch(batch.id) is not None:
        raise ValidationError(f"Batch id {batch.id} already exists on {medicine.name}.", field="id")
    return replace(medicine, batches=medicine.batches + (batch,))


def _sellable_batches(medicine: Medicine, as_of=None) -> list[Batch]:
    if as_of is None:
        return list(medicine.batches)
    return [b for b in medicine.batches if not is_expired(b, as_of)]


def _allocation_order(medicine: Medicine, policy: AllocationPolicy, as_of=None) -> list[Batch]:
    batches = _sellable_batches(medicine, as_of)
    if AllocationPolicy(policy) == AllocationPolicy.FEFO:
        # sorted() is stable, so equal expiries keep arrival order
        return sorted(batches, key=lambda b: b.expiry)
    return batches


def pricing_batch(medicine: Medicine, policy: AllocationPolicy | None = None, as_of=None) -> Batch | None:
    """The batch a sale would draw from first; it sets the unit price."""
    ordered = _allocation_order(medicine, policy or default_policy(), as_of)
    for batch in ordered:
        if batch.stock.amount > 0:
            return batch
    return ordered[0] if ordered else None


def plan_decrement(
    medicine: Medicine,
    amount: int,
    policy: AllocationPolicy | None = None,
    as_of=None,
) -> tuple[BatchAllocation, ...]:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("Quantity must be a positive whole number.", field="quantity")
    available = sellable_stock(medicine, as_of)
    if amount > available:
        raise InsufficientStockError(
            f"Insufficient stock for {medicine.name}: requested {amount}, available {available}.",
            shortages=[
                {
                    "medicineId": medicine.id,
                    "name": medicine.name,
                    "requested": amount,
                    "available": available,
                }
            ],
        )
    plan = []
    remaining = amount
    for batch in _allocation_order(medicine, policy or default_policy(), as_of):
        if remaining == 0:
            break
        take = min(batch.stock.amount, remaining)
        if take > 0:
            plan.append(BatchAllocation(medicine_id=medicine.id, batch_id=batch.id, amount=take))
            remaining -= take
    return tuple(plan)


def apply_allocations(medicine: Medicine, allocations) -> Medicine:
    taken = {}
    for allocation in allocations:
        if allocation.medicine_id != medicine.id:
            continue
        taken[allocation.batch_id] = taken.get(allocation.batch_id, 0) + allocation.amount
    unknown = set(taken) - {b.id for b in medicine.batches}
    if unknown:
        raise NotFoundError(f"Batch {sorted(unknown)[0]} not found on {medicine.name}.")
    batches = []
    for batch in medicine.batches:
        remaining = batch.stock.amount - taken.get(batch.id, 0)
        if remaining < 0:
            raise InsufficientStockError(
                f"Insufficient stock in batch {batch.batch_number} of {medicine.name}.",
                shortages=[
                    {
                        "medicineId": medicine.id,
                        "name": medicine.name,
                        "requested": taken[batch.id],
                        "available": batch.stock.amount,
                    }
                ],
            )
        batches.append(replace(batch, stock=batch.stock.with_amount(remaining)))
    return replace(medicine, batches=tuple(batches))


def decrement_stock(medicine: Medicine, amount: int, policy: AllocationPolicy | None = None, as_of=None) -> Medicine:
    return apply_allocations(medicine, plan_decrement(medicine, amount, policy=policy, as_of=as_of))


def receiving_batch(medicine: Medicine) -> Batch | None:
    """Receipts land on the batch with the latest expiry (the freshest stock)."""
    if not medicine.batches:
        return None
    return max(medicine.batches, key=lambda b: b.expiry)


def increment_stock(
    medicine: Medicine,
    amount: int,
    target_batch_id: str | None = None,
    new_batch: Batch | None = None,
) -> Medicine:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("Received quantity must be a positive whole number.", field="quantity")
    if target_batch_id is None and new_batch is not None:
        return add_batch(medicine, replace(new_batch, stock=new_batch.stock.with_amount(amount)))
    if target_batch_id is not None:
        target = medicine.get_batch(target_batch_id)
        if target is None:
            raise NotFoundError(f"Batch {target_batch_id} not found on {medicine.name}.")
    else:
        target = receiving_batch(medicine)
        if target is None:
            raise ValidationError(f"{medicine.name} has no batch to receive stock into.", field="batches")
    batches = tuple(
        replace(b, stock=b.stock.with_amount(b.stock.amount + amount)) if b.id == target.id else b
        for b in medicine.batches
    )
    return replace(medicine, batches=batches)
