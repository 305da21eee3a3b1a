from rest_framework import serializers

from apps.inventory.serializers import MedicineInputSerializer


class OrderItemInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, allow_blank=True)
    category = serializers.CharField(max_length=64, allow_blank=True)
    quantity = serializers.CharField(max_length=64, allow_blank=True)
    unitsPerPack = serializers.IntegerField(required=False, allow_null=True)
    unitName = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)


class CreateOrderSerializer(serializers.Serializer):
    wholesalerName = serializers.CharField(max_length=200, allow_blank=True)
    items = OrderItemInputSerializer(many=True, allow_empty=True)


class ReconcileSerializer(serializers.Serializer):
    itemIds = serializers.ListField(child=serializers.CharField(max_length=64), allow_empty=True)


class ReceiveNewMedicineSerializer(MedicineInputSerializer):
    pass


class ScannedItemSerializer(serializers.Serializer):
    # Scanner output is untrusted; shape only here, content rules in services
    name = serializers.CharField(allow_blank=True)
    quantity = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_blank=True)
    unitsPerPack = serializers.IntegerField(required=False, allow_null=True)


class ScanIntakeSerializer(serializers.Serializer):
    wholesalerName = serializers.CharField(required=False, allow_blank=True)
    items = ScannedItemSerializer(many=True)


class BatchScanIntakeSerializer(serializers.Serializer):
    category = serializers.CharField(max_length=64)
    medicineId = serializers.CharField(required=False, allow_blank=True)
    batchNumber = serializers.CharField(required=False, allow_blank=True)
    mfgDate = serializers.CharField(required=False, allow_blank=True)
    expiryDate = serializers.CharField(required=False, allow_blank=True)
    price = serializers.CharField(required=False, allow_blank=True)
