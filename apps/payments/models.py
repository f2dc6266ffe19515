from django.db import models

from apps.utils.models import TimestampedModel


class PaymentStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    CAPTURED = "CAPTURED", "Captured"
    FAILED = "FAILED", "Failed"
    REFUNDED = "REFUNDED", "Refunded"


class RefundStatus(models.TextChoices):
    INITIATED = "INITIATED", "Initiated"
    PROCESSING = "PROCESSING", "Processing"
    SUCCESS = "SUCCESS", "Success"
    FAILED = "FAILED", "Failed"


class Payment(TimestampedModel):
    """
    Gateway payment attached to a storefront order (bulk orders have none).
    """
    order = models.OneToOneField('orders.Order', on_delete=models.CASCADE, related_name='payment')
    provider = models.CharField(max_length=20, default="razorpay")
    razorpay_order_id = models.CharField(max_length=100, unique=True)
    razorpay_payment_id = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    razorpay_signature = models.CharField(max_length=255, blank=True, null=True)
    amount_in_paise = models.PositiveBigIntegerField()
    currency = models.CharField(max_length=3, default="INR")
    status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.CREATED, db_index=True
    )

    def __str__(self):
        return f"{self.razorpay_order_id} [{self.status}]"


class Refund(TimestampedModel):
    """
    Gateway refund reserved when an admin approves a refund request; refund_id
    is filled in once Razorpay answers.
    Its final state arrives through the refund.processed / refund.failed webhooks.
    """
    order = models.OneToOneField('orders.Order', on_delete=models.CASCADE, related_name='refund')
    refund_id = models.CharField(max_length=100, unique=True, null=True, blank=True)
    amount_in_paise = models.PositiveBigIntegerField()
    status = models.CharField(
        max_length=20, choices=RefundStatus.choices, default=RefundStatus.INITIATED, db_index=True
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.CharField(max_length=255, blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"{self.refund_id} [{self.status}]"


class WebhookLog(TimestampedModel):
    """
    Idempotency ledger for gateway webhooks.
    """
    event_id = models.CharField(max_length=150, unique=True)
    provider = models.CharField(max_length=20, default="razorpay")
    event = models.CharField(max_length=50, db_index=True)
    payload = models.JSONField()
    is_processed = models.BooleanField(default=False)
    error = models.TextField(blank=True, default="")

    def __str__(self):
        return f"{self.event_id} ({'done' if self.is_processed else 'pending'})"
