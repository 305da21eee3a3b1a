from django.urls import path
from .views import HealthView, AuditLogListView, SystemEventListView, RunExpiryScanView, RunLowStockScanView


urlpatterns = [
    path('', HealthView.as_view(), name='governance-root'),
    path('audit-logs/', AuditLogListView.as_view(), name='audit-logs'),
    path('events/', SystemEventListView.as_view(), name='system-events'),
    path('run/expiry-scan', RunExpiryScanView.as_view(), name='run-expiry-scan'),
    path('run/low-stock-scan', RunLowStockScanView.as_view(), name='run-low-stock-scan'),
]
