from django.db import transaction
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.governance.permissions import IsAdmin
from apps.governance.services import emit_event
from apps.inventory.domain import batch_to_dict
from apps.inventory.serializers import medicine_payload
from apps.inventory.units import describe_quantity
from core.stores import MEDICINES, ORDERS, save_changed
from core.views import StoreAPIView

from . import services
from .domain import order_item_to_dict, order_to_dict
from .reconciliation import ReconcileAction, receive_as_new_medicine, reconcile_items
from .serializers import (
    BatchScanIntakeSerializer,
    CreateOrderSerializer,
    ReceiveNewMedicineSerializer,
    ReconcileSerializer,
    ScanIntakeSerializer,
)


def order_payload(order) -> dict:
    data = order_to_dict(order)
    for item, row in zip(order.items, data["items"]):
        row["displayQuantity"] = describe_quantity(item.quantity, item.units_per_pack, item.unit_name)
    return data


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class OrderListCreateView(StoreAPIView):
    def get_permissions(self):
        if self.request.method == "DELETE":
            return [IsAdmin()]
        return super().get_permissions()

    @extend_schema(tags=["Procurement"], summary="List wholesaler orders", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        orders = self.store.load(ORDERS)
        wanted = request.query_params.get("status")
        if wanted:
            orders = [o for o in orders if o.status == wanted]
        return Response([order_payload(o) for o in orders])

    @extend_schema(
        tags=["Procurement"],
        summary="Create a wholesaler order",
        request=CreateOrderSerializer,
        responses={201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ser = CreateOrderSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = services.create_order(
            ser.validated_data["wholesalerName"],
            [dict(i) for i in ser.validated_data["items"]],
        )
        with transaction.atomic():
            self.store.save(ORDERS, order)
            self.audit("procurement_order", order.id, "CREATE", after=order_to_dict(order))
        return Response(order_payload(order), status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Procurement"], summary="Clear all wholesaler orders", responses={204: None})
    def delete(self, request):
        with transaction.atomic():
            count = services.clear_orders(self.store)
            self.audit("procurement_order", "*", "DELETE_ALL", after={"count": count})
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrderDetailView(StoreAPIView):
    @extend_schema(tags=["Procurement"], summary="Get a wholesaler order", responses={200: OpenApiTypes.OBJECT})
    def get(self, request, order_id: str):
        return Response(order_payload(self.store.get(ORDERS, order_id)))


class ReconcileView(StoreAPIView):
    @extend_schema(
        tags=["Procurement"],
        summary="Receive selected order items into inventory",
        request=ReconcileSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def post(self, request, order_id: str):
        ser = ReconcileSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            order = self.store.get(ORDERS, order_id)
            medicines = self.store.load(MEDICINES)
            result = reconcile_items(order, ser.validated_data["itemIds"], medicines)
            save_changed(self.store, MEDICINES, medicines, result.inventory)
            self.store.save(ORDERS, result.order)
            counts = {action.value: 0 for action in ReconcileAction}
            for outcome in result.outcomes:
                counts[outcome.action.value] += 1
            emit_event("ORDER_RECONCILED", {"order_id": order_id, "status": result.order.status.value, **counts})
            self.audit("procurement_order", order_id, "RECONCILE", after=order_to_dict(result.order))

        items = {i.id: i for i in result.order.items}
        outcomes = []
        for outcome in result.outcomes:
            row = {
                "itemId": outcome.item_id,
                "action": outcome.action.value,
                "item": order_item_to_dict(items[outcome.item_id]),
            }
            if outcome.action == ReconcileAction.MERGE:
                row["stockAdded"] = outcome.stock_delta
                row["medicine"] = medicine_payload(outcome.medicine)
            outcomes.append(row)
        return Response({"order": order_payload(result.order), "outcomes": outcomes})


class ReceiveNewMedicineView(StoreAPIView):
    @extend_schema(
        tags=["Procurement"],
        summary="Receive an order item as a brand-new medicine",
        request=ReceiveNewMedicineSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def post(self, request, order_id: str, item_id: str):
        ser = ReceiveNewMedicineSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            order = self.store.get(ORDERS, order_id)
            medicines = self.store.load(MEDICINES)
            order, _, medicine = receive_as_new_medicine(order, item_id, medicines, ser.to_medicine())
            self.store.save(MEDICINES, medicine)
            self.store.save(ORDERS, order)
            self.audit("procurement_order", order_id, "RECEIVE_NEW", after={"itemId": item_id, "medicineId": medicine.id})
        return Response({"order": order_payload(order), "medicine": medicine_payload(medicine)})


class CancelOrderView(StoreAPIView):
    @extend_schema(tags=["Procurement"], summary="Cancel a wholesaler order", responses={200: OpenApiTypes.OBJECT})
    def post(self, request, order_id: str):
        with transaction.atomic():
            order = services.cancel_order(self.store.get(ORDERS, order_id))
            self.store.save(ORDERS, order)
            self.audit("procurement_order", order_id, "CANCEL", after={"status": order.status.value})
        return Response(order_payload(order))


class OrderScanIntakeView(StoreAPIView):
    @extend_schema(
        tags=["Procurement"],
        summary="Validate scanned bill lines into draft order items",
        request=ScanIntakeSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ser = ScanIntakeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        items = services.order_items_from_scan([dict(i) for i in ser.validated_data["items"]])
        return Response(
            {
                "wholesalerName": (ser.validated_data.get("wholesalerName") or "").strip(),
                "items": [order_item_to_dict(i) for i in items],
            }
        )


class BatchScanIntakeView(StoreAPIView):
    @extend_schema(
        tags=["Procurement"],
        summary="Validate scanned batch details",
        request=BatchScanIntakeSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ser = BatchScanIntakeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        batch = services.batch_from_scan(
            data,
            self.store.load(MEDICINES),
            category=data["category"],
            medicine_id=data.get("medicineId") or None,
        )
        return Response(batch_to_dict(batch))
