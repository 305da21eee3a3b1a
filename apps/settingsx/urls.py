from django.urls import path
from .views import HealthView, AlertSettingsView


urlpatterns = [
    path('', HealthView.as_view(), name='settings-root'),
    path('alerts/', AlertSettingsView.as_view(), name='settings-alerts'),
]
