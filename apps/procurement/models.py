from django.db import models

from .domain import OrderItemStatus, OrderStatus


class WholesalerOrder(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    wholesaler_name = models.CharField(max_length=200)
    order_date = models.DateTimeField()
    status = models.CharField(max_length=24, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    received_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date"]

    def __str__(self) -> str:
        return f"{self.id} {self.wholesaler_name}"


class OrderItem(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    order = models.ForeignKey(WholesalerOrder, on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=64)
    quantity = models.CharField(max_length=64)
    units_per_pack = models.PositiveIntegerField(null=True, blank=True)
    unit_name = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=16, choices=OrderItemStatus.choices, default=OrderItemStatus.PENDING)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
