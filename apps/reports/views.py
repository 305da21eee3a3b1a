from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiTypes
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ValidationError
from core.stores import SALES
from core.views import StoreAPIView

from . import services


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class DashboardView(StoreAPIView):
    @extend_schema(
        tags=["Reports"],
        summary="Revenue, sales count and top sellers for a period",
        parameters=[
            OpenApiParameter("period", OpenApiTypes.INT, OpenApiParameter.QUERY, enum=list(services.DASHBOARD_PERIODS)),
        ],
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        raw = request.query_params.get("period", "7")
        try:
            period = int(raw)
        except ValueError:
            raise ValidationError(f"Period must be one of {services.DASHBOARD_PERIODS}.", field="period")
        return Response(services.dashboard_summary(self.store.load(SALES), period, timezone.now()))


class ProfitView(StoreAPIView):
    @extend_schema(
        tags=["Reports"],
        summary="Profit and margin per day",
        parameters=[
            OpenApiParameter("period", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=list(services.PROFIT_PERIODS)),
        ],
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        period = request.query_params.get("period", "30")
        return Response(services.profit_report(self.store.load(SALES), period, timezone.now()))


class CustomersView(StoreAPIView):
    @extend_schema(
        tags=["Reports"],
        summary="Per-customer purchase history",
        parameters=[
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("sort", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=list(services.CUSTOMER_SORTS)),
        ],
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return Response(
            services.customer_summaries(
                self.store.load(SALES),
                search=request.query_params.get("search", ""),
                sort=request.query_params.get("sort", "name_asc"),
            )
        )
