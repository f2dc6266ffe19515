from rest_framework import filters, generics
from rest_framework.views import APIView
from rest_framework.response import Response

from apps.accounts.permissions import IsNurseryAdmin
from apps.orders.serializers import OrderSerializer
from apps.utils.filters import AdminFilterBackend
from apps.utils.pagination import AdminListMixin
from .filters import RefundRequestFilter, TransactionFilter
from .serializers import RefundSerializer, TransactionSerializer
from .services import RefundService, PaymentReportService


class PaymentCardsView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        cards = PaymentReportService.payment_cards(
            request.query_params.get('from_date'),
            request.query_params.get('to_date'),
        )
        return Response({"message": "Showing the payment overview", "cards": cards})


class TransactionListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = TransactionSerializer
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = TransactionFilter
    search_fields = ['full_name', 'email', 'phone', 'order_id']
    list_message = "Showing all the payment transactions"
    envelope_key = results_key = "transactions"

    def get_queryset(self):
        return PaymentReportService.transactions()


class RefundCardsView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        cards = RefundService.refund_cards(
            request.query_params.get('from_date'),
            request.query_params.get('to_date'),
        )
        return Response({"message": "Showing the refund overview", "cards": cards})


class RefundRequestListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = OrderSerializer
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = RefundRequestFilter
    search_fields = ['full_name', 'email', 'order_id', 'phone']
    list_message = "Showing all the refund requests"
    envelope_key = "refunds"
    results_key = "orders"

    def get_queryset(self):
        return RefundService.refund_requests()


class CancelledRefundListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = OrderSerializer
    filter_backends = []
    list_message = "Showing all the cancelled refund requests"
    envelope_key = "refunds"
    results_key = "orders"

    def get_queryset(self):
        return RefundService.cancelled_refunds()


class RefundExportView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        return Response({"orders": OrderSerializer(RefundService.export_refunds(), many=True).data})


class ApproveRefundView(APIView):
    permission_classes = [IsNurseryAdmin]

    def post(self, request, order_pk):
        refund = RefundService.approve_refund(order_pk)
        return Response({
            "message": "Refund accepted successfully!",
            "refund": RefundSerializer(refund).data,
        })


class CancelRefundView(APIView):
    permission_classes = [IsNurseryAdmin]

    def post(self, request, order_pk):
        order = RefundService.cancel_refund(order_pk)
        return Response({
            "message": "Refund request cancelled successfully!",
            "order": OrderSerializer(order).data,
        })
