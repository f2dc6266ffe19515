from rest_framework import serializers

from apps.payments.serializers import PaymentSerializer, RefundSerializer
from apps.utils.validators import validate_phone
from .models import Order, ProgressTracker, PaymentMethod


class BulkOrderSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    product_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    delivery_date = serializers.DateField()
    delivery_location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1)
    # Rupees, e.g. "45.50"; converted to paise server-side
    price_per_unit = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=15, validators=[validate_phone])
    whatsapp = serializers.CharField(max_length=15, required=False, allow_blank=True)
    delivery_address = serializers.CharField()
    state = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100)
    pincode = serializers.CharField(max_length=10)
    area_name = serializers.CharField(max_length=255)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    metadata = serializers.JSONField(required=False)

    def validate_metadata(self, value):
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be an object.")
        return value


class CreateOrderSerializer(BulkOrderSerializer):
    terms_accepted = serializers.BooleanField()

    def validate_terms_accepted(self, value):
        if value is not True:
            raise serializers.ValidationError("terms_accepted must be true")
        return value


class RefundRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)
    files = serializers.ListField(
        child=serializers.FileField(), required=False, allow_empty=True, max_length=5
    )


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class StageSerializer(serializers.Serializer):
    stage = serializers.CharField()
    label = serializers.CharField()
    status = serializers.CharField()
    start = serializers.DateTimeField(allow_null=True)
    end = serializers.DateTimeField(allow_null=True)


class ProgressTrackerSerializer(serializers.ModelSerializer):
    stages = serializers.SerializerMethodField()

    class Meta:
        model = ProgressTracker
        fields = [
            'current_stage', 'progress_percentage', 'stages',
            'order_confirmed_status', 'order_confirmed_start', 'order_confirmed_end',
            'nursery_allocation_status', 'nursery_allocation_start', 'nursery_allocation_end',
            'growth_phase_status', 'growth_phase_start', 'growth_phase_end',
            'ready_for_dispatch_status', 'ready_for_dispatch_start', 'ready_for_dispatch_end',
            'delivered_status', 'delivered_start', 'delivered_end',
            'updated_at',
        ]
        read_only_fields = fields

    def get_stages(self, obj):
        return StageSerializer(obj.as_stages(), many=True).data


class OrderSerializer(serializers.ModelSerializer):
    payment = serializers.SerializerMethodField()
    progress_tracker = serializers.SerializerMethodField()
    refund = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_id', 'product_id', 'product_name', 'delivery_date', 'delivery_location',
            'quantity', 'price_per_unit', 'total_amount_in_paise', 'full_name', 'email', 'phone',
            'whatsapp', 'delivery_address', 'state', 'district', 'pincode', 'area_name',
            'payment_method', 'status', 'refund_request_date', 'refund_status', 'is_bulk_upload',
            'terms_accepted', 'metadata', 'created_at', 'updated_at',
            'payment', 'progress_tracker', 'refund',
        ]
        read_only_fields = fields

    def get_payment(self, obj):
        payment = getattr(obj, 'payment', None)
        return PaymentSerializer(payment).data if payment else None

    def get_progress_tracker(self, obj):
        tracker = getattr(obj, 'progress_tracker', None)
        return ProgressTrackerSerializer(tracker).data if tracker else None

    def get_refund(self, obj):
        refund = getattr(obj, 'refund', None)
        return RefundSerializer(refund).data if refund else None


class OrderExportSerializer(serializers.ModelSerializer):
    current_stage = serializers.CharField(source='progress_tracker.current_stage', default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'order_id', 'full_name', 'email', 'phone', 'state', 'district', 'pincode',
            'quantity', 'total_amount_in_paise', 'delivery_date', 'status', 'current_stage',
            'created_at',
        ]
