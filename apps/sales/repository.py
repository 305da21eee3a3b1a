from __future__ import annotations

from django.db import transaction

from . import domain, models


def to_snapshot(row: models.Sale) -> domain.SaleRecord:
    return domain.SaleRecord(
        id=row.id,
        customer_name=row.customer_name,
        doctor_name=row.doctor_name,
        sale_date=row.sale_date,
        items=tuple(
            domain.SaleItem(
                medicine_id=i.medicine_id,
                name=i.name,
                category=i.category,
                quantity=i.quantity,
                price_per_unit=i.price_per_unit,
                purchase_price_per_unit=i.purchase_price_per_unit,
                total=i.total,
            )
            for i in row.items.all()
        ),
        subtotal=row.subtotal,
        discount_percentage=row.discount_percentage,
        total_amount=row.total_amount,
        payment_mode=row.payment_mode,
    )


def load_sales() -> list[domain.SaleRecord]:
    return [to_snapshot(row) for row in models.Sale.objects.prefetch_related("items")]


@transaction.atomic
def save_sale(sale: domain.SaleRecord) -> None:
    row, created = models.Sale.objects.update_or_create(
        id=sale.id,
        defaults={
            "customer_name": sale.customer_name,
            "doctor_name": sale.doctor_name,
            "sale_date": sale.sale_date,
            "subtotal": sale.subtotal,
            "discount_percentage": sale.discount_percentage,
            "total_amount": sale.total_amount,
            "payment_mode": sale.payment_mode.value,
        },
    )
    if not created:
        # Lines never change after the sale; only the header (payment mode) does.
        return
    models.SaleItem.objects.bulk_create(
        [
            models.SaleItem(
                sale=row,
                medicine_id=item.medicine_id,
                name=item.name,
                category=item.category,
                quantity=item.quantity,
                price_per_unit=item.price_per_unit,
                purchase_price_per_unit=item.purchase_price_per_unit,
                total=item.total,
                position=position,
            )
            for position, item in enumerate(sale.items)
        ]
    )


def delete_sale(sale_id: str) -> None:
    models.Sale.objects.filter(id=sale_id).delete()


def delete_all() -> None:
    models.Sale.objects.all().delete()
