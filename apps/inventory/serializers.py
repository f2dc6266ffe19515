from rest_framework import serializers

from apps.utils.validators import validate_month
from .models import MonthlyInventory, InventoryStatusLog


class MonthlyInventorySerializer(serializers.ModelSerializer):
    remaining_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = MonthlyInventory
        fields = [
            'id', 'month', 'max_quantity', 'current_quantity', 'remaining_quantity',
            'active', 'reason', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class InventoryInputSerializer(serializers.Serializer):
    month = serializers.CharField(validators=[validate_month])
    max_quantity = serializers.IntegerField(min_value=0)
    current_quantity = serializers.IntegerField(min_value=0, required=False, default=0)
    active = serializers.BooleanField(required=False, default=True)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if 'max_quantity' in attrs and attrs.get('current_quantity', 0) > attrs['max_quantity']:
            raise serializers.ValidationError(
                {"current_quantity": "Current quantity cannot exceed maximum quantity."}
            )
        return attrs


class InventoryToggleSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class InventoryStatusLogSerializer(serializers.ModelSerializer):
    created_by = serializers.StringRelatedField()

    class Meta:
        model = InventoryStatusLog
        fields = ['id', 'active', 'reason', 'created_by', 'created_at']
