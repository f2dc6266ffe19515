from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django.conf import settings


class ServerInfoView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "app_name": settings.PROJECT_NAME,
            "version": "1.0.0",
            "debug": settings.DEBUG,
        })


class GlobalConfigView(APIView):
    """
    Public settings the storefront needs before checkout.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "razorpay_key_id": settings.RAZORPAY_KEY_ID,
            "currency": "INR",
            "delivery_period": settings.DELIVERY_PERIOD,
        })
