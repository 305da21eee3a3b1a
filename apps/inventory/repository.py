from __future__ import annotations

from django.db import transaction

from . import domain, models


def to_snapshot(row: models.Medicine) -> domain.Medicine:
    batches = tuple(
        domain.Batch(
            id=b.id,
            batch_number=b.batch_number,
            mfg=b.mfg_date,
            expiry=b.expiry_date,
            price=b.price,
            purchase_price=b.purchase_price,
            stock=domain.StockLevel(unit=b.stock_unit, amount=b.stock),
        )
        for b in row.batches.all()
    )
    return domain.Medicine(
        id=row.id,
        name=row.name,
        category=row.category,
        location=row.location,
        kind=row.kind,
        tablets_per_strip=row.tablets_per_strip,
        batches=batches,
        description=domain.description_from_dict(row.description),
    )


def load_medicines() -> list[domain.Medicine]:
    return [to_snapshot(row) for row in models.Medicine.objects.prefetch_related("batches")]


@transaction.atomic
def save_medicine(medicine: domain.Medicine) -> None:
    models.Medicine.objects.update_or_create(
        id=medicine.id,
        defaults={
            "name": medicine.name,
            "category": medicine.category,
            "kind": medicine.kind.value,
            "location": medicine.location,
            "tablets_per_strip": medicine.tablets_per_strip,
            "description": (
                domain.description_to_dict(medicine.description) if medicine.description else None
            ),
        },
    )
    keep = [b.id for b in medicine.batches]
    models.Batch.objects.filter(medicine_id=medicine.id).exclude(id__in=keep).delete()
    for position, batch in enumerate(medicine.batches):
        models.Batch.objects.update_or_create(
            id=batch.id,
            defaults={
                "medicine_id": medicine.id,
                "batch_number": batch.batch_number,
                "mfg_date": batch.mfg,
                "expiry_date": batch.expiry,
                "price": batch.price,
                "purchase_price": batch.purchase_price,
                "stock_unit": batch.stock.unit.value,
                "stock": batch.stock.amount,
                "position": position,
            },
        )


def delete_medicine(medicine_id: str) -> None:
    models.Medicine.objects.filter(id=medicine_id).delete()


def delete_all() -> None:
    models.Medicine.objects.all().delete()
