from rest_framework import serializers

from .domain import PaymentMode
from .processor import CartLine


class CartLineSerializer(serializers.Serializer):
    medicineId = serializers.CharField(max_length=64)
    quantity = serializers.IntegerField(min_value=1)


class CompleteSaleSerializer(serializers.Serializer):
    customerName = serializers.CharField(max_length=200, allow_blank=True)
    doctorName = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    paymentMode = serializers.ChoiceField(choices=PaymentMode.choices, default=PaymentMode.CASH)
    discountPercentage = serializers.DecimalField(
        max_digits=7, decimal_places=4, min_value=0, max_value=100, required=False, default=0
    )
    items = CartLineSerializer(many=True, allow_empty=True)

    def validate_customerName(self, value):
        if not value.strip():
            raise serializers.ValidationError("Customer name is required.")
        return value.strip()

    def cart(self) -> list[CartLine]:
        return [CartLine(medicine_id=i["medicineId"], quantity=i["quantity"]) for i in self.validated_data["items"]]


class SettleSerializer(serializers.Serializer):
    paymentMode = serializers.ChoiceField(choices=[c for c in PaymentMode.choices if c[0] != PaymentMode.PENDING])
