from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import OrderViewSet
from .views_admin import (
    AdminOrderListView, AdminOrderDetailView, AdminOrderStatusView, AdminBulkOrderView,
    AdminOrderExportView, EnumValuesView,
)

router = SimpleRouter()
router.register(r'', OrderViewSet, basename='orders')

urlpatterns = [
    path('admin/page/<int:page>/', AdminOrderListView.as_view(), name='admin-order-list'),
    path('admin/bulk/', AdminBulkOrderView.as_view(), name='admin-order-bulk'),
    path('admin/export/', AdminOrderExportView.as_view(), name='admin-order-export'),
    path('admin/enums/', EnumValuesView.as_view(), name='admin-enum-values'),
    path('admin/<int:pk>/', AdminOrderDetailView.as_view(), name='admin-order-detail'),
    path('admin/<int:pk>/status/', AdminOrderStatusView.as_view(), name='admin-order-status'),
    path('', include(router.urls)),
]
