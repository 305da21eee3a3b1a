from rest_framework import serializers

from .domain import medicine_from_dict, medicine_to_dict, batch_from_dict
from .ledger import is_low_stock, is_out_of_stock, soonest_expiry, total_stock
from .services import DuplicateAction, ImportMode, SortOption


class BatchInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    batchNumber = serializers.CharField(max_length=64)
    # ISO date or date-time; the codec truncates date-times to the UTC date
    mfg = serializers.CharField()
    expiry = serializers.CharField()
    price = serializers.DecimalField(max_digits=14, decimal_places=2)
    purchasePrice = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    stock = serializers.DictField(child=serializers.IntegerField(min_value=0))


class DescriptionSerializer(serializers.Serializer):
    illness = serializers.CharField(required=False, allow_blank=True)
    minAge = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    maxAge = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    gender = serializers.ChoiceField(choices=["male", "female", "any"], required=False)


class MedicineInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    name = serializers.CharField(max_length=200)
    category = serializers.CharField(max_length=64)
    location = serializers.CharField(max_length=120, required=False, allow_blank=True)
    tabletsPerStrip = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    description = DescriptionSerializer(required=False, allow_null=True)
    batches = BatchInputSerializer(many=True)
    confirmDuplicateName = serializers.BooleanField(required=False, default=False)

    def to_medicine(self, medicine_id: str | None = None):
        data = dict(self.validated_data)
        data.pop("confirmDuplicateName", None)
        if medicine_id is not None:
            data["id"] = medicine_id
        return medicine_from_dict(data)


class RestockSerializer(serializers.Serializer):
    batches = BatchInputSerializer(many=True)

    def to_batches(self, medicine):
        return [batch_from_dict(dict(b), medicine.kind) for b in self.validated_data["batches"]]


class BatchCheckSerializer(serializers.Serializer):
    batchNumber = serializers.CharField(max_length=64)
    medicineId = serializers.CharField(required=False, allow_blank=True)
    batchId = serializers.CharField(required=False, allow_blank=True)


class MedicineQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ListField(child=serializers.CharField(), required=False)
    sort = serializers.ChoiceField(choices=SortOption.choices, required=False, default=SortOption.NAME_ASC)


class ImportSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=ImportMode.choices, default=ImportMode.MERGE)
    onDuplicate = serializers.ChoiceField(choices=DuplicateAction.choices, default=DuplicateAction.UPDATE)
    medicines = serializers.ListField(child=serializers.DictField(), allow_empty=True)

    def to_medicines(self):
        return [medicine_from_dict(m) for m in self.validated_data["medicines"]]


def medicine_payload(medicine) -> dict:
    data = medicine_to_dict(medicine)
    expiry = soonest_expiry(medicine)
    data.update(
        {
            "kind": medicine.kind.value,
            "totalStock": total_stock(medicine),
            "isLowStock": is_low_stock(medicine),
            "isOutOfStock": is_out_of_stock(medicine),
            "soonestExpiry": expiry.isoformat() if expiry else None,
        }
    )
    return data
