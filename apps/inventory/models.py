from django.db import models

from .domain import MedicineKind, StockUnit


class Medicine(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=64)
    kind = models.CharField(max_length=16, choices=MedicineKind.choices)
    location = models.CharField(max_length=120, blank=True)
    tablets_per_strip = models.PositiveIntegerField(null=True, blank=True)
    description = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name", "category"], name="idx_medicine_name_cat"),
        ]

    def __str__(self):
        return f"{self.name} ({self.category})"


class Batch(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    medicine = models.ForeignKey(Medicine, on_delete=models.CASCADE, related_name="batches")
    batch_number = models.CharField(max_length=64)
    mfg_date = models.DateField()
    expiry_date = models.DateField()
    price = models.DecimalField(max_digits=14, decimal_places=2)
    purchase_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    stock_unit = models.CharField(max_length=16, choices=StockUnit.choices)
    stock = models.PositiveIntegerField(default=0)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=["batch_number"], name="idx_batch_number"),
            models.Index(fields=["expiry_date"], name="idx_batch_expiry"),
        ]

    def __str__(self):
        return f"{self.medicine_id} - {self.batch_number}"
