# apps/notifications/models.py
from django.db import models

from apps.utils.models import TimestampedModel, SingletonModel


class ValidSettings(models.TextChoices):
    NEW_BOOKINGS = "new_bookings", "New Bookings"
    PAYMENT_CONFIRMATIONS = "payment_confirmations", "Payment Confirmations"
    DAILY_SUMMARY = "daily_summary", "Daily Summary"
    WEEKLY_SUMMARY = "weekly_summary", "Weekly Summary"
    MONTHLY_SUMMARY = "monthly_summary", "Monthly Summary"


class EmailStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    SENT = "SENT", "Sent"
    FAILED = "FAILED", "Failed"


class NotificationSettings(SingletonModel):
    """
    Admin email toggles. One row for the whole nursery.
    """
    new_bookings = models.BooleanField(default=True)
    payment_confirmations = models.BooleanField(default=True)
    daily_summary = models.BooleanField(default=False)
    weekly_summary = models.BooleanField(default=False)
    monthly_summary = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Notification settings"
        verbose_name_plural = "Notification settings"

    def is_enabled(self, field: str) -> bool:
        return bool(getattr(self, field, False))

    def __str__(self):
        return "Notification settings"


class EmailNotification(TimestampedModel):
    """
    Outbox row for a single email. Created first, then sent by Celery.
    """
    event_key = models.CharField(max_length=100, db_index=True)
    recipient = models.EmailField()
    subject = models.CharField(max_length=255)
    template = models.CharField(max_length=255)
    context = models.JSONField(default=dict, blank=True)

    status = models.CharField(
        max_length=20,
        choices=EmailStatus.choices,
        default=EmailStatus.PENDING,
        db_index=True,
    )
    error = models.TextField(blank=True, default="")
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event_key", "status"], name="email_event_status_idx"),
        ]

    def __str__(self):
        return f"{self.event_key} -> {self.recipient} [{self.status}]"
