from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel
from .choices import OrderStatus, OrderRefundStatus, PaymentMethod

__all__ = ["Order", "ORDER_ID_PREFIX"]

ORDER_ID_PREFIX = "KP"


class Order(TimestampedModel):
    """
    A pepper sapling booking. ``order_id`` (KP2025-0001) is the public reference;
    the integer pk is used by the admin API.
    """
    order_id = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )

    product_id = models.PositiveIntegerField(null=True, blank=True)
    product_name = models.CharField(max_length=255, blank=True, default="")
    delivery_date = models.DateField()
    delivery_location = models.CharField(max_length=255, blank=True, default="")

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_per_unit = models.DecimalField(max_digits=10, decimal_places=2)
    total_amount_in_paise = models.PositiveBigIntegerField()

    # Customer / delivery snapshot
    full_name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=15)
    whatsapp = models.CharField(max_length=15, blank=True, default="")
    delivery_address = models.TextField()
    state = models.CharField(max_length=100)
    district = models.CharField(max_length=100)
    pincode = models.CharField(max_length=10)
    area_name = models.CharField(max_length=255)

    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.RAZORPAY
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING, db_index=True
    )

    refund_request_date = models.DateTimeField(null=True, blank=True)
    refund_status = models.CharField(
        max_length=20, choices=OrderRefundStatus.choices, null=True, blank=True, db_index=True
    )

    is_bulk_upload = models.BooleanField(default=False)
    terms_accepted = models.BooleanField(default=False)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.order_id} [{self.status}]"

    @property
    def total_amount(self):
        return self.total_amount_in_paise / 100

    @property
    def can_request_refund(self):
        return self.status == OrderStatus.PAID
