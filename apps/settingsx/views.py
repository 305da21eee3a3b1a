from django.db import transaction
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiTypes
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.governance.permissions import IsAdmin
from apps.governance.services import audit, request_meta
from .serializers import AlertSettingsSerializer
from . import services


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class AlertSettingsView(APIView):
    def get_permissions(self):
        if self.request.method == "PUT":
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    @extend_schema(tags=["Settings"], summary="Get alert thresholds", responses={200: AlertSettingsSerializer})
    def get(self, request):
        return Response({"expiryWarningDays": services.expiry_warning_days()})

    @extend_schema(
        tags=["Settings"],
        summary="Update alert thresholds",
        request=AlertSettingsSerializer,
        responses={200: AlertSettingsSerializer, 400: OpenApiTypes.OBJECT},
        examples=[OpenApiExample("Warn 60 days ahead", value={"expiryWarningDays": 60})],
    )
    def put(self, request):
        ser = AlertSettingsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        days = ser.validated_data["expiryWarningDays"]
        with transaction.atomic():
            before = services.expiry_warning_days()
            services.set_setting(services.EXPIRY_WARNING_DAYS_KEY, str(days), "Days ahead to flag expiring batches")
            audit(
                request.user,
                table="settings_kv",
                row_id=services.EXPIRY_WARNING_DAYS_KEY,
                action="UPSERT",
                before={"value": before},
                after={"value": days},
                meta=request_meta(request),
            )
        return Response({"expiryWarningDays": days})
