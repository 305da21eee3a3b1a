from django.urls import path
from .views import HealthView, DashboardView, ProfitView, CustomersView


urlpatterns = [
    path('', HealthView.as_view(), name='reports-root'),
    path('dashboard/', DashboardView.as_view(), name='reports-dashboard'),
    path('profit/', ProfitView.as_view(), name='reports-profit'),
    path('customers/', CustomersView.as_view(), name='reports-customers'),
]
