from rest_framework import serializers


class AlertSettingsSerializer(serializers.Serializer):
    expiryWarningDays = serializers.IntegerField(min_value=1, max_value=365)
