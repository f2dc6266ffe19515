import json
import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from apps.orders.serializers import OrderSerializer
from .gateway import RazorpayGateway
from .serializers import VerifyPaymentSerializer
from .services import PaymentService, WebhookService

logger = logging.getLogger(__name__)


class VerifyPaymentView(APIView):
    """
    Called by the storefront after Razorpay Checkout succeeds.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = PaymentService.verify_payment(
            request.user,
            data['order_id'],
            data['razorpay_payment_id'],
            data['razorpay_order_id'],
            data['razorpay_signature'],
        )
        return Response({
            "message": "Payment verified successfully",
            "order": OrderSerializer(order).data,
        })


class RazorpayWebhookView(APIView):
    """
    Handles Razorpay Webhooks with Strict Signature Verification.
    Idempotency is handled through WebhookLog.
    """
    permission_classes = []  # Allow public access for webhook
    authentication_classes = []
    throttle_classes = []

    def post(self, request, *args, **kwargs):
        signature = request.headers.get('X-Razorpay-Signature')
        # Must use raw request body for verification
        try:
            body = request.body.decode('utf-8')
        except UnicodeDecodeError:
            body = None

        if body is None or not RazorpayGateway.verify_webhook_signature(body, signature):
            logger.critical("Razorpay Webhook: Invalid Signature detected!")
            return Response({"error": "Invalid signature", "code": "invalid_signature"},
                            status=status.HTTP_400_BAD_REQUEST)

        try:
            event_data = json.loads(body)
        except json.JSONDecodeError:
            return Response({"error": "Malformed payload", "code": "invalid_payload"},
                            status=status.HTTP_400_BAD_REQUEST)

        result = WebhookService.process(event_data, request.headers.get('X-Razorpay-Event-Id'))
        return Response({"status": result}, status=status.HTTP_200_OK)
