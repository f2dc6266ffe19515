# apps/notifications/admin.py
from django.contrib import admin

from .models import NotificationSettings, EmailNotification


@admin.register(NotificationSettings)
class NotificationSettingsAdmin(admin.ModelAdmin):
    list_display = (
        "__str__",
        "new_bookings",
        "payment_confirmations",
        "daily_summary",
        "weekly_summary",
        "monthly_summary",
        "updated_at",
    )

    def has_add_permission(self, request):
        return not NotificationSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(EmailNotification)
class EmailNotificationAdmin(admin.ModelAdmin):
    list_display = ("event_key", "recipient", "subject", "status", "created_at", "sent_at")
    list_filter = ("event_key", "status")
    search_fields = ("recipient", "subject")
    readonly_fields = (
        "event_key",
        "recipient",
        "subject",
        "template",
        "context",
        "status",
        "error",
        "sent_at",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False
