from __future__ import annotations

from django.db import transaction

from . import domain, models


def to_snapshot(row: models.WholesalerOrder) -> domain.WholesalerOrder:
    return domain.WholesalerOrder(
        id=row.id,
        wholesaler_name=row.wholesaler_name,
        order_date=row.order_date,
        items=tuple(
            domain.OrderItem(
                id=i.id,
                name=i.name,
                category=i.category,
                quantity=i.quantity,
                units_per_pack=i.units_per_pack,
                unit_name=i.unit_name or None,
                status=i.status,
            )
            for i in row.items.all()
        ),
        status=row.status,
        received_date=row.received_date,
    )


def load_orders() -> list[domain.WholesalerOrder]:
    return [to_snapshot(row) for row in models.WholesalerOrder.objects.prefetch_related("items")]


@transaction.atomic
def save_order(order: domain.WholesalerOrder) -> None:
    models.WholesalerOrder.objects.update_or_create(
        id=order.id,
        defaults={
            "wholesaler_name": order.wholesaler_name,
            "order_date": order.order_date,
            "status": order.status.value,
            "received_date": order.received_date,
        },
    )
    keep = [i.id for i in order.items]
    models.OrderItem.objects.filter(order_id=order.id).exclude(id__in=keep).delete()
    for position, item in enumerate(order.items):
        models.OrderItem.objects.update_or_create(
            id=item.id,
            defaults={
                "order_id": order.id,
                "name": item.name,
                "category": item.category,
                "quantity": item.quantity,
                "units_per_pack": item.units_per_pack,
                "unit_name": item.unit_name or "",
                "status": item.status.value,
                "position": position,
            },
        )


def delete_order(order_id: str) -> None:
    models.WholesalerOrder.objects.filter(id=order_id).delete()


def delete_all() -> None:
    models.WholesalerOrder.objects.all().delete()
