"""Medicine and batch snapshots plus their JSON codecs.

Everything here is immutable. Ledger and service functions take these
snapshots and hand back new ones; nothing is persisted from this module.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from django.db import models
from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import ValidationError


BASE_CATEGORIES = ("Tablet", "Capsule", "Syrup", "Ointment", "Injection", "Other")
TABLET_FAMILY_CATEGORIES = {"tablet", "capsule"}
DEFAULT_TABLETS_PER_STRIP = 10


class MedicineKind(models.TextChoices):
    TABLET = "TABLET", "Tablet family"
    GENERIC = "GENERIC", "Generic"


class StockUnit(models.TextChoices):
    TABLETS = "tablets", "Tablets"
    UNITS = "quantity", "Units"


UNIT_FOR_KIND = {
    MedicineKind.TABLET: StockUnit.TABLETS,
    MedicineKind.GENERIC: StockUnit.UNITS,
}


def kind_for_category(category: str) -> MedicineKind:
    if (category or "").strip().lower() in TABLET_FAMILY_CATEGORIES:
        return MedicineKind.TABLET
    return MedicineKind.GENERIC


@dataclass(frozen=True)
class StockLevel:
    unit: StockUnit
    amount: int

    def __post_init__(self):
        object.__setattr__(self, "unit", StockUnit(self.unit))

    def with_amount(self, amount: int) -> "StockLevel":
        return StockLevel(unit=self.unit, amount=amount)


@dataclass(frozen=True)
class Batch:
    id: str
    batch_number: str
    mfg: date
    expiry: date
    price: Decimal
    stock: StockLevel
    purchase_price: Decimal | None = None


@dataclass(frozen=True)
class MedicineDescription:
    illness: str = ""
    min_age: int | None = None
    max_age: int | None = None
    gender: str = "any"


@dataclass(frozen=True)
class Medicine:
    id: str
    name: str
    category: str
    location: str
    kind: MedicineKind
    tablets_per_strip: int | None = None
    batches: tuple[Batch, ...] = field(default_factory=tuple)
    description: MedicineDescription | None = None

    def __post_init__(self):
        object.__setattr__(self, "kind", MedicineKind(self.kind))
        if self.kind == MedicineKind.TABLET:
            if not isinstance(self.tablets_per_strip, int) or self.tablets_per_strip < 1:
                raise ValidationError(
                    "Tablets per strip must be at least 1.", field="tabletsPerStrip"
                )
        elif self.tablets_per_strip is not None:
            raise ValidationError(
                "Only tablet and capsule medicines carry tablets per strip.",
                field="tabletsPerStrip",
            )

    @property
    def is_tablet_family(self) -> bool:
        return self.kind == MedicineKind.TABLET

    @property
    def stock_unit(self) -> StockUnit:
        return UNIT_FOR_KIND[self.kind]

    def get_batch(self, batch_id: str) -> Batch | None:
        for batch in self.batches:
            if batch.id == batch_id:
                return batch
        return None


def new_medicine(
    *,
    medicine_id: str,
    name: str,
    category: str,
    location: str = "",
    batches=(),
    tablets_per_strip: int | None = None,
    description: MedicineDescription | None = None,
) -> Medicine:
    """Build a medicine whose kind follows from its category."""
    kind = kind_for_category(category)
    if kind == MedicineKind.TABLET and tablets_per_strip is None:
        tablets_per_strip = DEFAULT_TABLETS_PER_STRIP
    if kind == MedicineKind.GENERIC:
        tablets_per_strip = None
    return Medicine(
        id=medicine_id,
        name=name,
        category=category,
        location=location,
        kind=kind,
        tablets_per_strip=tablets_per_strip,
        batches=tuple(batches),
        description=description,
    )


# --- codecs -----------------------------------------------------------------


def to_date(value, field_name: str) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            parsed = parse_date(text)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
        try:
            moment = parse_datetime(text)
        except ValueError:
            moment = None
        if moment is not None:
            return to_date(moment, field_name)
    raise ValidationError(f"Invalid date for {field_name}: {value!r}", field=field_name)


def to_decimal(value, field_name: str, *, allow_none: bool = False) -> Decimal | None:
    if value is None or value == "":
        if allow_none:
            return None
        raise ValidationError(f"{field_name} is required.", field=field_name)
    if isinstance(value, bool):
        raise ValidationError(f"Invalid number for {field_name}.", field=field_name)
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid number for {field_name}.", field=field_name)
    if not number.is_finite():
        raise ValidationError(f"Invalid number for {field_name}.", field=field_name)
    return number


def to_int(value, field_name: str, *, allow_none: bool = False) -> int | None:
    if value is None or value == "":
        if allow_none:
            return None
        raise ValidationError(f"{field_name} is required.", field=field_name)
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number.", field=field_name)
    if isinstance(value, int):
        return value
    number = to_decimal(value, field_name)
    if number != number.to_integral_value():
        raise ValidationError(f"{field_name} must be a whole number.", field=field_name)
    return int(number)


def batch_to_dict(batch: Batch) -> dict:
    data = {
        "id": batch.id,
        "batchNumber": batch.batch_number,
        "mfg": batch.mfg.isoformat(),
        "expiry": batch.expiry.isoformat(),
        "price": str(batch.price),
        "stock": {batch.stock.unit.value: batch.stock.amount},
    }
    if batch.purchase_price is not None:
        data["purchasePrice"] = str(batch.purchase_price)
    return data


def batch_from_dict(data: dict, kind: MedicineKind) -> Batch:
    stock = data.get("stock") or {}
    if not isinstance(stock, dict):
        raise ValidationError("Batch stock must be an object.", field="stock")
    unit = UNIT_FOR_KIND[kind]
    other = StockUnit.UNITS if unit == StockUnit.TABLETS else StockUnit.TABLETS
    if unit.value not in stock or other.value in stock:
        raise ValidationError(
            f"{'Tablet' if kind == MedicineKind.TABLET else 'Generic'} batches must carry "
            f"stock.{unit.value} only.",
            field="stock",
        )
    batch_number = str(data.get("batchNumber") or "").strip()
    if not batch_number:
        raise ValidationError("Batch number is required.", field="batchNumber")
    return Batch(
        id=str(data.get("id") or "").strip(),
        batch_number=batch_number,
        mfg=to_date(data.get("mfg"), "mfg"),
        expiry=to_date(data.get("expiry"), "expiry"),
        price=to_decimal(data.get("price"), "price"),
        purchase_price=to_decimal(data.get("purchasePrice"), "purchasePrice", allow_none=True),
        stock=StockLevel(unit=unit, amount=to_int(stock[unit.value], "stock")),
    )


def description_to_dict(description: MedicineDescription) -> dict:
    data = {"illness": description.illness, "gender": description.gender}
    if description.min_age is not None:
        data["minAge"] = description.min_age
    if description.max_age is not None:
        data["maxAge"] = description.max_age
    return data


def description_from_dict(data: dict | None) -> MedicineDescription | None:
    if not data:
        return None
    description = MedicineDescription(
        illness=str(data.get("illness") or "").strip(),
        min_age=to_int(data.get("minAge"), "minAge", allow_none=True),
        max_age=to_int(data.get("maxAge"), "maxAge", allow_none=True),
        gender=str(data.get("gender") or "any").lower(),
    )
    if description.gender not in {"male", "female", "any"}:
        raise ValidationError("Gender must be male, female or any.", field="gender")
    if (
        description.min_age is not None
        and description.max_age is not None
        and description.max_age < description.min_age
    ):
        raise ValidationError("Max age must be greater than or equal to min age.", field="maxAge")
    return description


def medicine_to_dict(medicine: Medicine) -> dict:
    data = {
        "id": medicine.id,
        "name": medicine.name,
        "category": medicine.category,
        "location": medicine.location,
        "batches": [batch_to_dict(b) for b in medicine.batches],
    }
    if medicine.is_tablet_family:
        data["tabletsPerStrip"] = medicine.tablets_per_strip
    if medicine.description is not None:
        data["description"] = description_to_dict(medicine.description)
    return data


def medicine_from_dict(data: dict) -> Medicine:
    category = str(data.get("category") or "").strip()
    if not category:
        raise ValidationError("Category is required.", field="category")
    kind = kind_for_category(category)
    tablets_per_strip = None
    if kind == MedicineKind.TABLET:
        tablets_per_strip = to_int(data.get("tabletsPerStrip"), "tabletsPerStrip", allow_none=True)
    return new_medicine(
        medicine_id=str(data.get("id") or "").strip(),
        name=str(data.get("name") or "").strip(),
        category=category,
        location=str(data.get("location") or "").strip(),
        tablets_per_strip=tablets_per_strip,
        batches=[batch_from_dict(b, kind) for b in data.get("batches") or []],
        description=description_from_dict(data.get("description")),
    )
