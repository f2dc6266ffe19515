# apps/notifications/serializers.py
from rest_framework import serializers

from .models import NotificationSettings, EmailNotification


class NotificationSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationSettings
        fields = [
            "new_bookings",
            "payment_confirmations",
            "daily_summary",
            "weekly_summary",
            "monthly_summary",
            "updated_at",
        ]
        read_only_fields = fields


class ToggleSettingSerializer(serializers.Serializer):
    # validated in the service so the error message stays the same for every caller
    field = serializers.CharField(max_length=50)


class EmailNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailNotification
        fields = ["id", "event_key", "recipient", "subject", "status", "error", "sent_at", "created_at"]
        read_only_fields = fields


class SummarySerializer(serializers.Serializer):
    visitors = serializers.IntegerField()
    orders = serializers.IntegerField()
    total_revenue = serializers.IntegerField()
    total_pending_revenue = serializers.IntegerField()
    period = serializers.CharField()


