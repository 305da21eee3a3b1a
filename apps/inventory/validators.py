from __future__ import annotations

from core.exceptions import ValidationError

from .domain import Batch, Medicine


def normalize_batch_number(batch_number: str) -> str:
    return (batch_number or "").strip().lower()


def find_duplicate_batch(
    candidate: str,
    medicines,
    exclude_medicine_id: str | None = None,
    exclude_batch_id: str | None = None,
) -> Medicine | None:
    """First medicine holding a batch numbered ``candidate`` (case-insensitive).

    The batch identified by (exclude_medicine_id, exclude_batch_id) is skipped
    so a batch being edited in place does not collide with itself.
    """
    wanted = normalize_batch_number(candidate)
    if not wanted:
        return None
    for medicine in medicines:
        for batch in medicine.batches:
            if medicine.id == exclude_medicine_id and batch.id == exclude_batch_id:
                continue
            if normalize_batch_number(batch.batch_number) == wanted:
                return medicine
    return None


def find_repeated_batch_number(batch_numbers) -> str | None:
    seen = set()
    for number in batch_numbers:
        key = normalize_batch_number(number)
        if not key:
            continue
        if key in seen:
            return number
        seen.add(key)
    return None


def validate_new_batches(batches: list[Batch] | tuple[Batch, ...], medicines, medicine_id: str | None = None) -> None:
    """Reject batch numbers that repeat within ``batches`` or exist elsewhere.

    ``medicines`` is the inventory to compare against; pass it without the
    medicine being saved when that medicine's own batches are in ``batches``.
    """
    for batch in batches:
        if not normalize_batch_number(batch.batch_number):
            raise ValidationError("Batch number is required.", field="batchNumber")
    repeated = find_repeated_batch_number(b.batch_number for b in batches)
    if repeated is not None:
        raise ValidationError(
            f"Batch number {repeated} is entered more than once.",
            field="batchNumber",
            batchNumber=repeated,
        )
    for batch in batches:
        conflict = find_duplicate_batch(batch.batch_number, medicines, medicine_id, batch.id)
        if conflict is not None:
            raise ValidationError(
                f"Batch number {batch.batch_number} already exists for {conflict.name}.",
                field="batchNumber",
                batchNumber=batch.batch_number,
                conflict={"medicineId": conflict.id, "name": conflict.name},
            )
