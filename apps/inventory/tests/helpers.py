from datetime import date
from decimal import Decimal

from apps.inventory.domain import Batch, StockLevel, StockUnit, new_medicine


def make_batch(batch_id, number, amount, *, unit=StockUnit.TABLETS, expiry=date(2030, 1, 1),
               mfg=date(2024, 1, 1), price="25.00", purchase_price=None):
    return Batch(
        id=batch_id,
        batch_number=number,
        mfg=mfg,
        expiry=expiry,
        price=Decimal(price),
        purchase_price=Decimal(purchase_price) if purchase_price is not None else None,
        stock=StockLevel(unit=unit, amount=amount),
    )


def make_tablet(medicine_id="m-para", name="Paracetamol", batches=None, tablets_per_strip=10, category="Tablet"):
    if batches is None:
        batches = [make_batch("b-para-1", "PCM-001", 500)]
    return new_medicine(
        medicine_id=medicine_id,
        name=name,
        category=category,
        location="A1",
        batches=batches,
        tablets_per_strip=tablets_per_strip,
    )


def make_generic(medicine_id="m-syrup", name="Cough Syrup", batches=None, category="Syrup"):
    if batches is None:
        batches = [make_batch("b-syrup-1", "CS-001", 20, unit=StockUnit.UNITS, price="95.00")]
    return new_medicine(medicine_id=medicine_id, name=name, category=category, location="B1", batches=batches)
