from rest_framework import serializers
from .models import Payment, Refund


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            'id', 'provider', 'razorpay_order_id', 'razorpay_payment_id',
            'amount_in_paise', 'currency', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class RefundSerializer(serializers.ModelSerializer):
    class Meta:
        model = Refund
        fields = [
            'id', 'refund_id', 'amount_in_paise', 'status', 'processed_at',
            'failed_at', 'failure_reason', 'metadata', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class VerifyPaymentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    razorpay_payment_id = serializers.CharField(max_length=100)
    razorpay_order_id = serializers.CharField(max_length=100)
    razorpay_signature = serializers.CharField(max_length=255)


class TransactionSerializer(serializers.Serializer):
    """
    Admin payments table: one row per order with its gateway payment.
    """
    id = serializers.IntegerField()
    order_id = serializers.CharField()
    full_name = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField()
    total_amount_in_paise = serializers.IntegerField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()
    payment = serializers.SerializerMethodField()

    def get_payment(self, obj):
        payment = getattr(obj, 'payment', None)
        return PaymentSerializer(payment).data if payment else None
