from django.db import transaction
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiTypes, OpenApiParameter
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.governance.services import emit_event
from apps.reports.services import EXPIRY_WINDOWS, expiry_report, low_stock_report, out_of_stock_report
from core.exceptions import ValidationError
from core.stores import MEDICINES
from core.views import StoreAPIView

from . import services
from .domain import medicine_to_dict
from .serializers import (
    BatchCheckSerializer,
    ImportSerializer,
    MedicineInputSerializer,
    MedicineQuerySerializer,
    RestockSerializer,
    medicine_payload,
)
from .validators import find_duplicate_batch


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class MedicineListCreateView(StoreAPIView):
    @extend_schema(
        tags=["Inventory"],
        summary="List medicines",
        parameters=[
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY, description="Name, batch number or location"),
            OpenApiParameter("category", OpenApiTypes.STR, OpenApiParameter.QUERY, many=True),
            OpenApiParameter("sort", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=services.SortOption.values),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        query = MedicineQuerySerializer(
            data={
                "search": request.query_params.get("search", ""),
                "category": request.query_params.getlist("category"),
                "sort": request.query_params.get("sort") or services.SortOption.NAME_ASC,
            }
        )
        query.is_valid(raise_exception=True)
        found = services.search_medicines(
            self.store.load(MEDICINES),
            search=query.validated_data.get("search", ""),
            categories=query.validated_data.get("category", []),
            sort=query.validated_data["sort"],
        )
        return Response([medicine_payload(m) for m in found])

    @extend_schema(
        tags=["Inventory"],
        summary="Add a medicine with its batches",
        request=MedicineInputSerializer,
        responses={201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ser = MedicineInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            result = services.save_medicine(
                ser.to_medicine(),
                self.store.load(MEDICINES),
                confirm_duplicate_name=ser.validated_data["confirmDuplicateName"],
                create=True,
            )
            self.store.save(MEDICINES, result.medicine)
            self.audit("inventory_medicine", result.medicine.id, "CREATE", after=medicine_to_dict(result.medicine))
        return Response(medicine_payload(result.medicine), status=status.HTTP_201_CREATED)


class MedicineDetailView(StoreAPIView):
    @extend_schema(tags=["Inventory"], summary="Get a medicine", responses={200: OpenApiTypes.OBJECT})
    def get(self, request, medicine_id: str):
        medicine = services.find_medicine(self.store.load(MEDICINES), medicine_id)
        return Response(medicine_payload(medicine))

    @extend_schema(
        tags=["Inventory"],
        summary="Update a medicine and its batches",
        request=MedicineInputSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def put(self, request, medicine_id: str):
        ser = MedicineInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            inventory = self.store.load(MEDICINES)
            before = services.find_medicine(inventory, medicine_id)
            result = services.save_medicine(ser.to_medicine(medicine_id=medicine_id), inventory)
            self.store.save(MEDICINES, result.medicine)
            self.audit(
                "inventory_medicine",
                medicine_id,
                "UPDATE",
                before=medicine_to_dict(before),
                after=medicine_to_dict(result.medicine),
            )
        return Response(medicine_payload(result.medicine))

    @extend_schema(tags=["Inventory"], summary="Delete a medicine", responses={204: None, 404: OpenApiTypes.OBJECT})
    def delete(self, request, medicine_id: str):
        with transaction.atomic():
            inventory = self.store.load(MEDICINES)
            before = services.find_medicine(inventory, medicine_id)
            services.delete_medicine(medicine_id, inventory)
            self.store.delete(MEDICINES, medicine_id)
            self.audit("inventory_medicine", medicine_id, "DELETE", before=medicine_to_dict(before))
        return Response(status=status.HTTP_204_NO_CONTENT)


class RestockView(StoreAPIView):
    @extend_schema(
        tags=["Inventory"],
        summary="Add newly arrived batches to a medicine",
        request=RestockSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def post(self, request, medicine_id: str):
        ser = RestockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            inventory = self.store.load(MEDICINES)
            medicine = services.find_medicine(inventory, medicine_id)
            result = services.restock_medicine(medicine_id, ser.to_batches(medicine), inventory)
            self.store.save(MEDICINES, result.medicine)
            self.audit(
                "inventory_medicine",
                medicine_id,
                "RESTOCK",
                before=medicine_to_dict(medicine),
                after=medicine_to_dict(result.medicine),
            )
        return Response(medicine_payload(result.medicine))


class BatchCheckView(StoreAPIView):
    @extend_schema(
        tags=["Inventory"],
        summary="Check whether a batch number is already used",
        parameters=[
            OpenApiParameter("batchNumber", OpenApiTypes.STR, OpenApiParameter.QUERY, required=True),
            OpenApiParameter("medicineId", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("batchId", OpenApiTypes.STR, OpenApiParameter.QUERY),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        ser = BatchCheckSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        conflict = find_duplicate_batch(
            ser.validated_data["batchNumber"],
            self.store.load(MEDICINES),
            ser.validated_data.get("medicineId") or None,
            ser.validated_data.get("batchId") or None,
        )
        return Response(
            {
                "duplicate": conflict is not None,
                "conflict": {"medicineId": conflict.id, "name": conflict.name} if conflict else None,
            }
        )


class SellableView(StoreAPIView):
    @extend_schema(tags=["Inventory"], summary="Medicines that can be sold today", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        found = services.sellable_medicines(self.store.load(MEDICINES), timezone.now())
        return Response([medicine_payload(m) for m in found])


class CategoriesView(StoreAPIView):
    @extend_schema(tags=["Inventory"], summary="Known medicine categories", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response(services.categories(self.store.load(MEDICINES)))


class LowStockView(StoreAPIView):
    @extend_schema(tags=["Inventory"], summary="Low stock medicines", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response(low_stock_report(self.store.load(MEDICINES)))


class OutOfStockView(StoreAPIView):
    @extend_schema(tags=["Inventory"], summary="Out of stock medicines", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response(out_of_stock_report(self.store.load(MEDICINES)))


class ExpiringView(StoreAPIView):
    @extend_schema(
        tags=["Inventory"],
        summary="Expired or soon-to-expire batches",
        parameters=[OpenApiParameter("window", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=list(EXPIRY_WINDOWS))],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        window = request.query_params.get("window", "30")
        return Response(expiry_report(self.store.load(MEDICINES), window, timezone.now()))


class ExportView(StoreAPIView):
    @extend_schema(tags=["Inventory"], summary="Export the inventory as JSON", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        medicines = self.store.load(MEDICINES)
        return Response(
            {
                "exportedAt": timezone.now().isoformat(),
                "medicines": [medicine_to_dict(m) for m in medicines],
            }
        )


class ImportView(StoreAPIView):
    @extend_schema(
        tags=["Inventory"],
        summary="Import medicines (replace or merge)",
        request=ImportSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ser = ImportSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        imported = ser.to_medicines()
        if not imported and ser.validated_data["mode"] == services.ImportMode.REPLACE:
            raise ValidationError("Refusing to replace the inventory with an empty list.", field="medicines")
        with transaction.atomic():
            result = services.import_medicines(
                imported,
                self.store.load(MEDICINES),
                mode=ser.validated_data["mode"],
                on_duplicate=ser.validated_data["onDuplicate"],
            )
            self.store.save_all(MEDICINES, result.inventory)
            summary = {
                "mode": ser.validated_data["mode"],
                "added": result.added,
                "updated": result.updated,
                "skipped": result.skipped,
            }
            emit_event("INVENTORY_IMPORTED", summary)
            self.audit("inventory_medicine", "*", "IMPORT", after=summary)
        return Response(dict(summary, total=len(result.inventory)))
