"""Read-only figures computed from medicine and sale snapshots."""
from __future__ import annotations

from collections import Counter, OrderedDict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.utils import timezone

from apps.inventory.ledger import (
    days_until_expiry,
    is_low_stock,
    is_out_of_stock,
    soonest_expiry,
    total_stock,
    utc_date,
)
from apps.sales.domain import PaymentMode
from core.exceptions import ValidationError

CURRENCY_QUANT = Decimal("0.01")
DASHBOARD_PERIODS = (7, 30, 90)
PROFIT_PERIODS = ("7", "30", "90", "all")
EXPIRY_WINDOWS = ("expired", "30", "60", "90")
CUSTOMER_SORTS = ("name_asc", "last_purchase_desc", "total_spent_desc", "pending_desc")
TOP_ITEMS = 5


def _money(value: Decimal) -> str:
    return str(value.quantize(CURRENCY_QUANT, rounding=ROUND_HALF_UP))


def _paid(sales):
    return [s for s in sales if s.payment_mode != PaymentMode.PENDING]


def _period_start(now, days: int):
    return utc_date(now) - timedelta(days=days - 1)


def dashboard_summary(sales, period_days: int = 7, now=None) -> dict:
    if period_days not in DASHBOARD_PERIODS:
        raise ValidationError(f"Period must be one of {DASHBOARD_PERIODS}.", field="period")
    now = now or timezone.now()
    today = utc_date(now)
    start = _period_start(now, period_days)
    in_period = [s for s in _paid(sales) if start <= utc_date(s.sale_date) <= today]

    revenue = sum((s.total_amount for s in in_period), Decimal("0"))
    daily = OrderedDict(((start + timedelta(days=n)).isoformat(), Decimal("0")) for n in range(period_days))
    modes = Counter()
    quantities = Counter()
    names = {}
    for sale in in_period:
        daily[utc_date(sale.sale_date).isoformat()] += sale.total_amount
        modes[sale.payment_mode.value] += 1
        for item in sale.items:
            quantities[item.medicine_id] += item.quantity
            names[item.medicine_id] = (item.name, item.category)

    top = [
        {"medicineId": mid, "name": names[mid][0], "category": names[mid][1], "quantity": qty}
        for mid, qty in sorted(quantities.items(), key=lambda kv: (-kv[1], names[kv[0]][0].lower()))[:TOP_ITEMS]
    ]
    return {
        "period": period_days,
        "totalRevenue": _money(revenue),
        "totalSales": len(in_period),
        "averageSale": _money(revenue / len(in_period)) if in_period else _money(Decimal("0")),
        "todaySales": sum(1 for s in in_period if utc_date(s.sale_date) == today),
        "daily": [{"date": day, "revenue": _money(total)} for day, total in daily.items()],
        "paymentModes": dict(modes),
        "topSelling": top,
    }


def profit_report(sales, period: str = "30", now=None) -> dict:
    """Revenue against purchase cost, per day and in total.

    Revenue is the line total before any bill discount. Lines whose batch had
    no purchase price are left out of cost and counted in missingPurchasePrice.
    """
    period = str(period)
    if period not in PROFIT_PERIODS:
        raise ValidationError(f"Period must be one of {PROFIT_PERIODS}.", field="period")
    now = now or timezone.now()
    considered = _paid(sales)
    if period != "all":
        start = _period_start(now, int(period))
        considered = [s for s in considered if start <= utc_date(s.sale_date) <= utc_date(now)]

    days = {}
    missing = 0
    for sale in considered:
        day = days.setdefault(utc_date(sale.sale_date).isoformat(), {"revenue": Decimal("0"), "cost": Decimal("0")})
        sale_missing = False
        for item in sale.items:
            day["revenue"] += item.total
            if item.purchase_price_per_unit is None:
                sale_missing = True
                continue
            day["cost"] += item.purchase_price_per_unit * item.quantity
        if sale_missing:
            missing += 1

    rows = []
    revenue = cost = Decimal("0")
    for day in sorted(days):
        figures = days[day]
        revenue += figures["revenue"]
        cost += figures["cost"]
        rows.append(_profit_row(figures["revenue"], figures["cost"], date=day))
    summary = _profit_row(revenue, cost)
    summary.update({"period": period, "salesCount": len(considered), "missingPurchasePrice": missing, "daily": rows})
    return summary


def _profit_row(revenue: Decimal, cost: Decimal, **extra) -> dict:
    profit = revenue - cost
    margin = (profit / revenue * 100) if revenue else Decimal("0")
    row = dict(extra)
    row.update({"revenue": _money(revenue), "cost": _money(cost), "profit": _money(profit), "margin": _money(margin)})
    return row


def customer_summaries(sales, search: str = "", sort: str = "name_asc") -> list[dict]:
    if sort not in CUSTOMER_SORTS:
        raise ValidationError(f"Sort must be one of {CUSTOMER_SORTS}.", field="sort")
    grouped = {}
    for sale in sales:
        key = sale.customer_name.strip().lower()
        entry = grouped.setdefault(
            key,
            {"name": sale.customer_name.strip(), "spent": Decimal("0"), "pending": Decimal("0"), "history": []},
        )
        if sale.payment_mode == PaymentMode.PENDING:
            entry["pending"] += sale.total_amount
        else:
            entry["spent"] += sale.total_amount
        entry["history"].append(sale)

    term = (search or "").strip().lower()
    rows = []
    for entry in grouped.values():
        if term and term not in entry["name"].lower():
            continue
        history = sorted(entry["history"], key=lambda s: s.sale_date, reverse=True)
        rows.append(
            {
                "name": entry["name"],
                "totalSpent": entry["spent"],
                "pendingAmount": entry["pending"],
                "lastPurchase": history[0].sale_date,
                "saleIds": [s.id for s in history],
            }
        )

    if sort == "name_asc":
        rows.sort(key=lambda r: r["name"].lower())
    elif sort == "last_purchase_desc":
        rows.sort(key=lambda r: r["lastPurchase"], reverse=True)
    elif sort == "total_spent_desc":
        rows.sort(key=lambda r: r["totalSpent"], reverse=True)
    else:
        rows.sort(key=lambda r: r["pendingAmount"], reverse=True)

    for row in rows:
        row["totalSpent"] = _money(row["totalSpent"])
        row["pendingAmount"] = _money(row["pendingAmount"])
        row["lastPurchase"] = row["lastPurchase"].isoformat()
    return rows


def expiry_report(medicines, window: str = "30", as_of=None) -> list[dict]:
    """Batches with stock left, either already expired or expiring within ``window`` days."""
    window = str(window)
    if window not in EXPIRY_WINDOWS:
        raise ValidationError(f"Window must be one of {EXPIRY_WINDOWS}.", field="window")
    as_of = as_of or timezone.now()
    rows = []
    for medicine in medicines:
        for batch in medicine.batches:
            if batch.stock.amount <= 0:
                continue
            days = days_until_expiry(batch, as_of)
            if window == "expired":
                if days >= 0:
                    continue
            elif not 0 <= days <= int(window):
                continue
            rows.append(
                {
                    "medicineId": medicine.id,
                    "name": medicine.name,
                    "category": medicine.category,
                    "location": medicine.location,
                    "batchId": batch.id,
                    "batchNumber": batch.batch_number,
                    "expiry": batch.expiry.isoformat(),
                    "daysUntilExpiry": days,
                    "stock": {batch.stock.unit.value: batch.stock.amount},
                }
            )
    rows.sort(key=lambda r: (r["daysUntilExpiry"], r["name"].lower()))
    return rows


def _stock_row(medicine) -> dict:
    expiry = soonest_expiry(medicine)
    return {
        "medicineId": medicine.id,
        "name": medicine.name,
        "category": medicine.category,
        "location": medicine.location,
        "totalStock": total_stock(medicine),
        "stockUnit": medicine.stock_unit.value,
        "soonestExpiry": expiry.isoformat() if expiry else None,
    }


def out_of_stock_report(medicines) -> list[dict]:
    return [_stock_row(m) for m in sorted(medicines, key=lambda m: m.name.lower()) if is_out_of_stock(m)]


def low_stock_report(medicines) -> list[dict]:
    return [_stock_row(m) for m in sorted(medicines, key=lambda m: m.name.lower()) if is_low_stock(m)]
