# apps/notifications/urls.py
from django.urls import path

from .views import NotificationSettingsView, SummaryView, EmailLogListView

urlpatterns = [
    path("settings/", NotificationSettingsView.as_view(), name="notification-settings"),
    path("summary/<str:range_name>/", SummaryView.as_view(), name="notification-summary"),
    path("emails/", EmailLogListView.as_view(), name="notification-email-log"),
]
