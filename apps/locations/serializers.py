from rest_framework import serializers

from .models import Location


class LocationSerializer(serializers.ModelSerializer):
    state = serializers.CharField(min_length=1, max_length=100)
    district = serializers.CharField(min_length=1, max_length=100)
    pin_code = serializers.CharField(min_length=3, max_length=10)
    min_quantity = serializers.IntegerField(min_value=1)
    max_quantity = serializers.IntegerField(min_value=1)
    price_per_unit = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    class Meta:
        model = Location
        fields = [
            'id', 'state', 'district', 'pin_code', 'min_quantity', 'max_quantity',
            'price_per_unit', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        # duplicates are reported by the service with its own message
        validators = []

    def validate(self, attrs):
        instance = self.instance
        low = attrs.get('min_quantity', getattr(instance, 'min_quantity', None))
        high = attrs.get('max_quantity', getattr(instance, 'max_quantity', None))
        if low is not None and high is not None and high < low:
            raise serializers.ValidationError(
                {"max_quantity": "Maximum quantity must be greater than or equal to minimum quantity."}
            )
        return attrs
