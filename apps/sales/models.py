from decimal import Decimal

from django.db import models

from .domain import PaymentMode


class Sale(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    customer_name = models.CharField(max_length=200)
    doctor_name = models.CharField(max_length=200, blank=True)
    sale_date = models.DateTimeField()
    subtotal = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    discount_percentage = models.DecimalField(max_digits=7, decimal_places=4, default=Decimal("0"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    payment_mode = models.CharField(max_length=16, choices=PaymentMode.choices, default=PaymentMode.CASH)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sale_date"]
        indexes = [
            models.Index(fields=["sale_date"], name="idx_sale_date"),
            models.Index(fields=["customer_name"], name="idx_sale_customer"),
        ]

    def __str__(self):
        return f"{self.id} {self.customer_name}"


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="items")
    # Plain id, not a foreign key: the sale outlives the medicine it sold.
    medicine_id = models.CharField(max_length=64)
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=64)
    quantity = models.PositiveIntegerField()
    price_per_unit = models.DecimalField(max_digits=14, decimal_places=4)
    purchase_price_per_unit = models.DecimalField(max_digits=14, decimal_places=4, null=True, blank=True)
    total = models.DecimalField(max_digits=14, decimal_places=4)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
