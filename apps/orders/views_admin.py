from rest_framework import filters, generics, status
from rest_framework.views import APIView
from rest_framework.response import Response

from apps.accounts.permissions import IsNurseryAdmin
from apps.notifications.models import ValidSettings
from apps.payments.models import PaymentStatus, RefundStatus
from apps.utils.filters import AdminFilterBackend
from apps.utils.pagination import AdminListMixin
from .filters import AdminOrderFilter, OrderExportFilter
from .models import OrderStatus, OrderRefundStatus, PaymentMethod, StageType, StageStatus
from .serializers import (
    BulkOrderSerializer, OrderSerializer, OrderExportSerializer, ProgressTrackerSerializer,
    UpdateOrderStatusSerializer,
)
from .services import OrderService, OrderAdminService

ORDER_SEARCH_FIELDS = ['full_name', 'phone', 'delivery_address', 'order_id']


class AdminOrderListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = OrderSerializer
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = AdminOrderFilter
    search_fields = ORDER_SEARCH_FIELDS
    list_message = "Showing all the orders"
    envelope_key = results_key = "orders"

    def get_queryset(self):
        return OrderAdminService.paid_orders()


class AdminOrderDetailView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request, pk):
        order = OrderAdminService.get_order(pk)
        return Response({
            "message": f"Showing the specific order data of order {order.order_id}",
            "order": OrderSerializer(order).data,
        })

    def delete(self, request, pk):
        OrderAdminService.delete_order(pk)
        return Response({"message": "Order deleted successfully"})


class AdminOrderStatusView(APIView):
    permission_classes = [IsNurseryAdmin]

    def patch(self, request, pk):
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tracker = OrderAdminService.update_order_status(pk, serializer.validated_data['status'])
        return Response({
            "message": "Order status updated successfully",
            "progress_tracker": ProgressTrackerSerializer(tracker).data,
        })


class AdminBulkOrderView(APIView):
    permission_classes = [IsNurseryAdmin]

    def post(self, request):
        serializer = BulkOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.bulk_order(serializer.validated_data)
        return Response(
            {"message": "Bulk order created successfully", "order": OrderSerializer(order).data},
            status=status.HTTP_201_CREATED,
        )


class AdminOrderExportView(generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = OrderExportSerializer
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = OrderExportFilter
    search_fields = ORDER_SEARCH_FIELDS

    def get_queryset(self):
        return OrderAdminService.paid_orders()

    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return Response({"orders": self.get_serializer(qs, many=True).data})


class EnumValuesView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        return Response({
            "message": "Showing all the list of enum values",
            "enum_values": {
                "payment_methods": PaymentMethod.values,
                "order_payment_status": OrderStatus.values,
                "payment_order_status": PaymentStatus.values,
                "order_refund_tracking_status": OrderRefundStatus.values,
                "stage_types": StageType.values,
                "stage_status": StageStatus.values,
                "refund_status": RefundStatus.values,
                "location_status": ["active", "inactive"],
                "valid_settings": ValidSettings.values,
            },
        })
