from django.urls import path
from .views import (
    HealthView,
    MedicineListCreateView,
    MedicineDetailView,
    RestockView,
    BatchCheckView,
    SellableView,
    CategoriesView,
    LowStockView,
    OutOfStockView,
    ExpiringView,
    ExportView,
    ImportView,
)


urlpatterns = [
    path('', HealthView.as_view(), name='inventory-root'),
    path('medicines/', MedicineListCreateView.as_view(), name='inventory-medicines'),
    path('medicines/<str:medicine_id>/', MedicineDetailView.as_view(), name='inventory-medicine-detail'),
    path('medicines/<str:medicine_id>/batches/', RestockView.as_view(), name='inventory-medicine-restock'),
    path('batches/check/', BatchCheckView.as_view(), name='inventory-batch-check'),
    path('sellable/', SellableView.as_view(), name='inventory-sellable'),
    path('categories/', CategoriesView.as_view(), name='inventory-categories'),
    path('low-stock/', LowStockView.as_view(), name='inventory-low-stock'),
    path('out-of-stock/', OutOfStockView.as_view(), name='inventory-out-of-stock'),
    path('expiring/', ExpiringView.as_view(), name='inventory-expiring'),
    path('export/', ExportView.as_view(), name='inventory-export'),
    path('import/', ImportView.as_view(), name='inventory-import'),
]
