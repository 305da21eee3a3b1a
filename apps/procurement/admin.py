from django.contrib import admin
from .models import WholesalerOrder, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(WholesalerOrder)
class WholesalerOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "wholesaler_name", "order_date", "status", "received_date")
    list_filter = ("status",)
    search_fields = ("id", "wholesaler_name")
    inlines = [OrderItemInline]
