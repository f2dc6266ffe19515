from django.urls import path

from .views import (
    InventoryListCreateView,
    InventoryMonthView,
    InventoryDeleteView,
    InventoryToggleView,
    AvailableMonthsView,
)

urlpatterns = [
    path('available/', AvailableMonthsView.as_view(), name='inventory-available'),
    path('admin/', InventoryListCreateView.as_view(), name='admin-inventory'),
    path('admin/month/<str:month>/', InventoryMonthView.as_view(), name='admin-inventory-month'),
    path('admin/<int:pk>/', InventoryDeleteView.as_view(), name='admin-inventory-delete'),
    path('admin/<int:pk>/toggle/', InventoryToggleView.as_view(), name='admin-inventory-toggle'),
]
