import logging

from django.db import transaction
from drf_spectacular.utils import extend_schema, OpenApiTypes, OpenApiParameter
from rest_framework import status
from rest_framework.response import Response

from apps.governance.permissions import IsAdmin
from apps.governance.services import emit_event
from core.stores import MEDICINES, SALES, save_changed
from core.views import StoreAPIView

from .domain import PaymentMode, next_bill_number, sale_to_dict
from .processor import complete_sale, settle_payment
from .serializers import CompleteSaleSerializer, SettleSerializer

logger = logging.getLogger(__name__)


class SaleListCreateView(StoreAPIView):
    def get_permissions(self):
        if self.request.method == "DELETE":
            return [IsAdmin()]
        return super().get_permissions()

    @extend_schema(
        tags=["Sales"],
        summary="Sales history",
        parameters=[
            OpenApiParameter("paymentMode", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=PaymentMode.values),
            OpenApiParameter("customer", OpenApiTypes.STR, OpenApiParameter.QUERY),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        sales = self.store.load(SALES)
        mode = request.query_params.get("paymentMode")
        customer = (request.query_params.get("customer") or "").strip().lower()
        if mode:
            sales = [s for s in sales if s.payment_mode == mode]
        if customer:
            sales = [s for s in sales if customer in s.customer_name.lower()]
        return Response([sale_to_dict(s) for s in sales])

    @extend_schema(
        tags=["Sales"],
        summary="Complete a sale",
        request=CompleteSaleSerializer,
        responses={201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ser = CompleteSaleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        with transaction.atomic():
            medicines = self.store.load(MEDICINES)
            result = complete_sale(
                ser.cart(),
                data["customerName"],
                medicines,
                payment_mode=data["paymentMode"],
                doctor_name=data.get("doctorName", ""),
                discount_percentage=data.get("discountPercentage", 0),
                sale_id=next_bill_number(self.store.load(SALES)),
            )
            save_changed(self.store, MEDICINES, medicines, result.updated_medicines)
            self.store.save(SALES, result.sale_record)
            record = sale_to_dict(result.sale_record)
            emit_event(
                "SALE_COMPLETED",
                {"sale_id": record["id"], "total": record["totalAmount"], "payment_mode": record["paymentMode"]},
            )
            self.audit("sales_sale", record["id"], "CREATE", after=record)
        payload = dict(record)
        payload["allocations"] = [
            {"medicineId": a.medicine_id, "batchId": a.batch_id, "quantity": a.amount} for a in result.plan
        ]
        return Response(payload, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Sales"], summary="Clear the sales history", responses={204: None})
    def delete(self, request):
        with transaction.atomic():
            count = len(self.store.load(SALES))
            self.store.delete_all(SALES)
            self.audit("sales_sale", "*", "DELETE_ALL", after={"count": count})
        logger.warning("Sales history cleared by %s (%d sales)", request.user, count)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SaleDetailView(StoreAPIView):
    @extend_schema(tags=["Sales"], summary="Get a sale", responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT})
    def get(self, request, sale_id: str):
        return Response(sale_to_dict(self.store.get(SALES, sale_id)))


class SettlePaymentView(StoreAPIView):
    @extend_schema(
        tags=["Sales"],
        summary="Settle a pending (credit) sale",
        request=SettleSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def post(self, request, sale_id: str):
        ser = SettleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            sale = self.store.get(SALES, sale_id)
            settled = settle_payment(sale, ser.validated_data["paymentMode"])
            self.store.save(SALES, settled)
            self.audit(
                "sales_sale",
                sale_id,
                "SETTLE",
                before={"paymentMode": sale.payment_mode.value},
                after={"paymentMode": settled.payment_mode.value},
            )
        return Response(sale_to_dict(settled))
