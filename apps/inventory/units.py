from __future__ import annotations

import re
from decimal import Decimal, ROUND_HALF_UP

from core.exceptions import ParseError, ValidationError

from .domain import kind_for_category, MedicineKind


LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")
TABLET_PACK_WORDS = ("box", "jar")
GENERIC_PACK_WORDS = ("pack", "box")


def parse_leading_number(raw_quantity) -> Decimal:
    """'10 strip' -> 10, '2.5 box' -> 2.5. Raises ParseError when no number leads."""
    if isinstance(raw_quantity, bool):
        raise ParseError(f"Quantity {raw_quantity!r} does not start with a number.")
    if isinstance(raw_quantity, (int, Decimal)):
        return Decimal(raw_quantity)
    match = LEADING_NUMBER.match(str(raw_quantity or ""))
    if not match:
        raise ParseError(f"Quantity {raw_quantity!r} does not start with a number.")
    return Decimal(match.group(1))


def _positive_factor(value, field_name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a positive number.", field=field_name)
    factor = Decimal(str(value))
    if factor <= 0:
        raise ValidationError(f"{field_name} must be a positive number.", field=field_name)
    return factor


def to_stock_units(
    raw_quantity,
    is_tablet_family: bool,
    tablets_per_strip: int | None,
    units_per_pack: int | None = None,
) -> int:
    """Normalize an order/receipt quantity to whole stock units.

    Packs are expanded first (``units_per_pack``), then strips to tablets for
    tablet-family medicines. The final count is rounded half-up.
    """
    count = parse_leading_number(raw_quantity)
    if units_per_pack is not None:
        count *= _positive_factor(units_per_pack, "unitsPerPack")
    if is_tablet_family:
        count *= _positive_factor(tablets_per_strip, "tabletsPerStrip")
    return int(count.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_stock_units(
    stock_units: int,
    is_tablet_family: bool,
    tablets_per_strip: int | None,
    units_per_pack: int | None = None,
) -> Decimal:
    count = Decimal(stock_units)
    if is_tablet_family:
        count /= _positive_factor(tablets_per_strip, "tabletsPerStrip")
    if units_per_pack is not None:
        count /= _positive_factor(units_per_pack, "unitsPerPack")
    return count


def needs_pack_clarification(quantity: str, category: str) -> tuple[bool, str | None]:
    """Whether an order line must state how many strips/units one pack holds."""
    text = (quantity or "").lower()
    if kind_for_category(category) == MedicineKind.TABLET and any(w in text for w in TABLET_PACK_WORDS):
        return True, "strips"
    if any(w in text for w in GENERIC_PACK_WORDS):
        return True, "units"
    return False, None


def describe_quantity(quantity: str, units_per_pack: int | None = None, unit_name: str | None = None) -> str:
    if units_per_pack and unit_name:
        return f"{quantity} ({units_per_pack} {unit_name}/pack)"
    return quantity
