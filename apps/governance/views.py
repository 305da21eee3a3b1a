from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiTypes
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import IsAdmin
from .models import AuditLog, SystemEvent
from . import services


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class AuditLogListView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(
        tags=["Governance"],
        summary="List audit log entries",
        parameters=[
            OpenApiParameter("table", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("record_id", OpenApiTypes.STR, OpenApiParameter.QUERY),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        qs = AuditLog.objects.all()
        table = request.query_params.get("table")
        record_id = request.query_params.get("record_id")
        if table:
            qs = qs.filter(table_name=table)
        if record_id:
            qs = qs.filter(record_id=str(record_id))
        data = list(
            qs.order_by("-created_at").values(
                "id", "actor_user_id", "action", "table_name", "record_id", "after_json", "created_at"
            )[:500]
        )
        return Response(data)


class SystemEventListView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(tags=["Governance"], summary="List recent system events", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        qs = SystemEvent.objects.all()
        code = request.query_params.get("code")
        if code:
            qs = qs.filter(code=code)
        return Response(list(qs.order_by("-created_at").values("id", "code", "payload", "created_at")[:200]))


class RunExpiryScanView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(tags=["Governance"], summary="Run the expiry scan now", responses={200: OpenApiTypes.OBJECT})
    def post(self, request):
        result = services.run_expiry_scan()
        return Response(result, status=status.HTTP_200_OK)


class RunLowStockScanView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(tags=["Governance"], summary="Run the low stock scan now", responses={200: OpenApiTypes.OBJECT})
    def post(self, request):
        result = services.run_low_stock_scan()
        return Response({"count": len(result), "items": result}, status=status.HTTP_200_OK)
