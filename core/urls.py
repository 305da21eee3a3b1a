from django.urls import path
from . import views


urlpatterns = [
    path('api/_health', views.health, name='health'),
    path('api/health/', views.HealthCheckView.as_view(), name='health-check'),
]
