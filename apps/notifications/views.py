# apps/notifications/views.py
from rest_framework import generics, views
from rest_framework.response import Response

from apps.accounts.permissions import IsNurseryAdmin
from . import services
from .models import EmailNotification
from .serializers import (
    NotificationSettingsSerializer,
    ToggleSettingSerializer,
    EmailNotificationSerializer,
    SummarySerializer,
)


class NotificationSettingsView(views.APIView):
    """
    GET   /api/v1/notifications/settings/
    PATCH /api/v1/notifications/settings/   body: {"field": "daily_summary"}
    """
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        return Response({
            "message": "Notification settings",
            "settings": NotificationSettingsSerializer(services.get_settings()).data,
        })

    def patch(self, request):
        serializer = ToggleSettingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        row = services.toggle_setting(serializer.validated_data["field"])
        return Response({
            "message": "Setting updated successfully",
            "settings": NotificationSettingsSerializer(row).data,
        })


class SummaryView(views.APIView):
    """
    GET /api/v1/notifications/summary/<daily|weekly|monthly>/
    """
    permission_classes = [IsNurseryAdmin]

    def get(self, request, range_name):
        data = services.summary(range_name)
        return Response({
            "message": f"{range_name.capitalize()} summary",
            "dashboard_data": SummarySerializer(data).data,
        })


class EmailLogListView(generics.ListAPIView):
    """
    Outbox for the admin panel, newest first.
    """
    serializer_class = EmailNotificationSerializer
    permission_classes = [IsNurseryAdmin]

    def get_queryset(self):
        qs = EmailNotification.objects.all()
        status = self.request.query_params.get("status")
        if status:
            qs = qs.filter(status=status.upper())
        return qs[:100]
