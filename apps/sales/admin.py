from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("id", "customer_name", "sale_date", "total_amount", "payment_mode")
    list_filter = ("payment_mode",)
    search_fields = ("id", "customer_name", "doctor_name")
    inlines = [SaleItemInline]
