from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date

from django.db import models

from core.exceptions import NotFoundError, ValidationError

from .domain import BASE_CATEGORIES, Medicine
from .ledger import add_batch, sellable_stock, soonest_expiry
from .validators import normalize_batch_number, validate_new_batches

logger = logging.getLogger(__name__)


class ImportMode(models.TextChoices):
    REPLACE = "replace", "Replace inventory"
    MERGE = "merge", "Merge into inventory"


class DuplicateAction(models.TextChoices):
    UPDATE = "update", "Merge batches into existing"
    ADD = "add", "Add as separate medicine"
    SKIP = "skip", "Skip"


class SortOption(models.TextChoices):
    NAME_ASC = "name_asc", "Name (A-Z)"
    EXPIRY_ASC = "expiry_asc", "Expiry (soonest first)"
    EXPIRY_DESC = "expiry_desc", "Expiry (latest first)"


@dataclass(frozen=True)
class SaveResult:
    medicine: Medicine
    inventory: tuple[Medicine, ...]


@dataclass(frozen=True)
class ImportResult:
    inventory: tuple[Medicine, ...]
    added: int = 0
    updated: int = 0
    skipped: int = 0


def new_id() -> str:
    return uuid.uuid4().hex


def find_medicine(inventory, medicine_id: str) -> Medicine:
    for medicine in inventory:
        if medicine.id == medicine_id:
            return medicine
    raise NotFoundError(f"Medicine {medicine_id} not found.")


def batch_ids(inventory) -> set[str]:
    return {b.id for m in inventory for b in m.batches}


def _fresh_batches(batches, taken_batch_ids) -> tuple:
    return tuple(
        b if b.id and b.id not in taken_batch_ids else replace(b, id=new_id())
        for b in batches
    )


def _with_ids(medicine: Medicine, taken_batch_ids=frozenset(), *, fresh_id: bool = False) -> Medicine:
    batches = _fresh_batches(medicine.batches, taken_batch_ids)
    medicine_id = new_id() if fresh_id or not medicine.id else medicine.id
    return replace(medicine, id=medicine_id, batches=batches)


def _validated(medicine: Medicine) -> Medicine:
    """Rebuild ``medicine`` batch by batch so every batch passes add_batch."""
    name = medicine.name.strip()
    if not name:
        raise ValidationError("Medicine name is required.", field="name")
    if len(medicine.category.strip()) < 2:
        raise ValidationError("Category must be at least 2 characters.", field="category")
    if not medicine.batches:
        raise ValidationError("At least one batch is required.", field="batches")
    built = replace(medicine, name=name, category=medicine.category.strip(), batches=())
    for batch in medicine.batches:
        built = add_batch(built, batch)
    return built


def _replace_in(inventory, medicine: Medicine) -> tuple[Medicine, ...]:
    found = False
    result = []
    for item in inventory:
        if item.id == medicine.id:
            result.append(medicine)
            found = True
        else:
            result.append(item)
    if not found:
        result.append(medicine)
    return tuple(result)


def save_medicine(
    candidate: Medicine, inventory, *, confirm_duplicate_name: bool = False, create: bool = False
) -> SaveResult:
    """Create or update a medicine with all of its batches.

    With ``create`` the candidate always gets a fresh id, so a create can never
    overwrite an existing medicine.
    """
    inventory = tuple(inventory)
    if create:
        candidate = replace(candidate, id="")
    others_batch_ids = batch_ids(m for m in inventory if m.id != candidate.id)
    candidate = _validated(_with_ids(candidate, others_batch_ids))
    is_new = all(m.id != candidate.id for m in inventory)
    if is_new and not confirm_duplicate_name:
        for existing in inventory:
            if existing.name.strip().lower() == candidate.name.lower():
                raise ValidationError(
                    f"A medicine named {existing.name} already exists.",
                    code="duplicate_name",
                    field="name",
                    conflict={"medicineId": existing.id, "name": existing.name},
                )
    others = [m for m in inventory if m.id != candidate.id]
    validate_new_batches(candidate.batches, others, candidate.id)
    logger.info("Saved medicine %s (%s, %d batches)", candidate.id, candidate.name, len(candidate.batches))
    return SaveResult(medicine=candidate, inventory=_replace_in(inventory, candidate))


def restock_medicine(medicine_id: str, new_batches, inventory) -> SaveResult:
    """Append newly arrived batches to an existing medicine."""
    inventory = tuple(inventory)
    medicine = find_medicine(inventory, medicine_id)
    new_batches = list(_fresh_batches(new_batches, batch_ids(inventory)))
    if not new_batches:
        raise ValidationError("At least one batch is required.", field="batches")
    validate_new_batches(new_batches, inventory)
    for batch in new_batches:
        medicine = add_batch(medicine, batch)
    logger.info("Restocked %s with %d batch(es)", medicine.name, len(new_batches))
    return SaveResult(medicine=medicine, inventory=_replace_in(inventory, medicine))


def delete_medicine(medicine_id: str, inventory) -> tuple[Medicine, ...]:
    inventory = tuple(inventory)
    find_medicine(inventory, medicine_id)
    return tuple(m for m in inventory if m.id != medicine_id)


def _identity(medicine: Medicine) -> tuple[str, str]:
    return medicine.name.strip().lower(), medicine.category.strip().lower()


def import_medicines(imported, inventory, mode=ImportMode.MERGE, on_duplicate=DuplicateAction.UPDATE) -> ImportResult:
    """Bring a medicine list (for example a JSON backup) into the inventory.

    ``replace`` discards the current inventory. ``merge`` matches duplicates
    on (name, category) and resolves each with ``on_duplicate``. Either the
    whole import is valid or nothing changes.
    """
    mode = ImportMode(mode)
    on_duplicate = DuplicateAction(on_duplicate)
    result = [] if mode == ImportMode.REPLACE else list(inventory)
    added = updated = skipped = 0

    for incoming in imported:
        existing_ids = {m.id for m in result}
        match = None
        if mode == ImportMode.MERGE:
            match = next((m for m in result if _identity(m) == _identity(incoming)), None)

        if match is not None and on_duplicate == DuplicateAction.SKIP:
            skipped += 1
            continue

        if match is not None and on_duplicate == DuplicateAction.UPDATE:
            known = {normalize_batch_number(b.batch_number) for b in match.batches}
            fresh = _fresh_batches(
                [b for b in incoming.batches if normalize_batch_number(b.batch_number) not in known],
                batch_ids(result),
            )
            validate_new_batches(fresh, result)
            merged = match
            for batch in fresh:
                merged = add_batch(merged, batch)
            result = list(_replace_in(result, merged))
            updated += 1
            continue

        candidate = _validated(
            _with_ids(incoming, batch_ids(result), fresh_id=incoming.id in existing_ids)
        )
        validate_new_batches(candidate.batches, result, candidate.id)
        result.append(candidate)
        added += 1

    logger.info("Imported medicines (%s): added=%d updated=%d skipped=%d", mode, added, updated, skipped)
    return ImportResult(inventory=tuple(result), added=added, updated=updated, skipped=skipped)


def search_medicines(inventory, search: str = "", categories=(), sort=SortOption.NAME_ASC) -> list[Medicine]:
    term = (search or "").strip().lower()
    wanted = {c.strip().lower() for c in categories if c and c.strip()}
    found = []
    for medicine in inventory:
        if wanted and medicine.category.lower() not in wanted:
            continue
        if term and not (
            term in medicine.name.lower()
            or term in medicine.location.lower()
            or any(term in b.batch_number.lower() for b in medicine.batches)
        ):
            continue
        found.append(medicine)

    sort = SortOption(sort)
    if sort == SortOption.NAME_ASC:
        return sorted(found, key=lambda m: m.name.lower())
    with_expiry = [m for m in found if soonest_expiry(m) is not None]
    without_expiry = [m for m in found if soonest_expiry(m) is None]
    with_expiry.sort(key=soonest_expiry, reverse=sort == SortOption.EXPIRY_DESC)
    return with_expiry + without_expiry


def sellable_medicines(inventory, as_of: date) -> list[Medicine]:
    """Medicines that can go on a bill today: unexpired stock above zero."""
    return sorted(
        (m for m in inventory if sellable_stock(m, as_of) > 0),
        key=lambda m: m.name.lower(),
    )


def categories(inventory) -> list[str]:
    names = {c for c in BASE_CATEGORIES}
    names.update(m.category for m in inventory if m.category)
    return sorted(names, key=str.lower)
