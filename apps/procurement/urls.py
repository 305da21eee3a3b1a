from django.urls import path
from .views import (
    HealthView, OrderListCreateView, OrderDetailView, ReconcileView,
    ReceiveNewMedicineView, CancelOrderView, OrderScanIntakeView, BatchScanIntakeView,
)

urlpatterns = [
    path('', HealthView.as_view(), name='procurement-root'),
    path('orders/', OrderListCreateView.as_view(), name='orders'),
    path('orders/scan-intake/', OrderScanIntakeView.as_view(), name='orders-scan-intake'),
    path('orders/<str:order_id>/', OrderDetailView.as_view(), name='orders-detail'),
    path('orders/<str:order_id>/reconcile/', ReconcileView.as_view(), name='orders-reconcile'),
    path('orders/<str:order_id>/cancel/', CancelOrderView.as_view(), name='orders-cancel'),
    path(
        'orders/<str:order_id>/items/<str:item_id>/receive-new/',
        ReceiveNewMedicineView.as_view(),
        name='orders-receive-new',
    ),
    path('batches/scan-intake/', BatchScanIntakeView.as_view(), name='batches-scan-intake'),
]
