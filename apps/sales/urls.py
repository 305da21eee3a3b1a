from django.urls import path

from .views import SaleListCreateView, SaleDetailView, SettlePaymentView

urlpatterns = [
    path("", SaleListCreateView.as_view(), name="sales"),
    path("<str:sale_id>/", SaleDetailView.as_view(), name="sales-detail"),
    path("<str:sale_id>/settle/", SettlePaymentView.as_view(), name="sales-settle"),
]
