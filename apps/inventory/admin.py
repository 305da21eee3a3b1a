from django.contrib import admin
from .models import Medicine, Batch


class BatchInline(admin.TabularInline):
    model = Batch
    extra = 0


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "kind", "location", "tablets_per_strip")
    list_filter = ("kind", "category")
    search_fields = ("name", "batches__batch_number")
    inlines = [BatchInline]


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("id", "medicine", "batch_number", "expiry_date", "stock", "stock_unit", "price")
    list_filter = ("stock_unit",)
    search_fields = ("batch_number", "medicine__name")
