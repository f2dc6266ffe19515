from django.http import HttpResponse
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .invoice import render_invoice
from .serializers import CreateOrderSerializer, OrderSerializer, RefundRequestSerializer
from .services import OrderService


class OrderViewSet(viewsets.GenericViewSet):
    """
    Storefront orders of the signed-in customer.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    lookup_value_regex = r"\d+"
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        return OrderService.user_orders(self.request.user)

    def list(self, request):
        orders = self.get_queryset()
        return Response({
            "message": "Showing all the orders",
            "orders": OrderSerializer(orders, many=True).data,
        })

    def create(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = OrderService.create_order(request.user, serializer.validated_data)
        return Response(
            {
                "message": "Order created successfully",
                "order": OrderSerializer(result["order"]).data,
                "razorpay_key_id": result["razorpay_key_id"],
                "razorpay_order_id": result["razorpay_order_id"],
                "amount": result["amount"],
                "currency": result["currency"],
            },
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        order = OrderService.get_user_order(request.user, pk)
        return Response({"order": OrderSerializer(order).data})

    @action(detail=True, methods=['post'], url_path='refund-request')
    def refund_request(self, request, pk=None):
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.request_refund(
            request.user,
            pk,
            serializer.validated_data['reason'],
            serializer.validated_data.get('files', []),
        )
        return Response({
            "message": "Refund request raised successfully!",
            "order": OrderSerializer(order).data,
        })

    @action(detail=True, methods=['get'])
    def invoice(self, request, pk=None):
        order = OrderService.get_user_order(request.user, pk)
        return HttpResponse(render_invoice(order), content_type="text/html; charset=utf-8")
