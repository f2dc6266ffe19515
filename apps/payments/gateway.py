import logging

import razorpay
from django.conf import settings
from rest_framework import status

from apps.utils.exceptions import BusinessLogicException
from apps.utils.resilience import CircuitBreaker

logger = logging.getLogger(__name__)

razorpay_breaker = CircuitBreaker(service_name="Payment gateway", failure_threshold=5, recovery_timeout=30)


class RazorpayGateway:
    """
    Thin wrapper over the Razorpay SDK.

    Network and API failures surface as BusinessLogicException so views never
    see SDK exception types; repeated failures trip the circuit breaker.
    """

    @staticmethod
    def get_client():
        return razorpay.Client(auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET))

    @staticmethod
    @razorpay_breaker
    def _create_order(payload: dict) -> dict:
        return RazorpayGateway.get_client().order.create(payload)

    @staticmethod
    @razorpay_breaker
    def _refund(payment_id: str, payload: dict) -> dict:
        return RazorpayGateway.get_client().payment.refund(payment_id, payload)

    @staticmethod
    def create_order(amount_in_paise: int, receipt: str, notes: dict = None) -> dict:
        payload = {
            "amount": amount_in_paise,
            "currency": "INR",
            "receipt": receipt,
            "payment_capture": 1,
        }
        if notes:
            payload["notes"] = notes
        try:
            return RazorpayGateway._create_order(payload)
        except BusinessLogicException:
            raise
        except Exception as e:
            logger.error(f"Razorpay Order Create Failed: {e}")
            raise BusinessLogicException(
                "Payment gateway error", code="gateway_error",
                status_code=status.HTTP_502_BAD_GATEWAY,
            )

    @staticmethod
    def refund(payment_id: str, amount_in_paise: int, reason: str) -> dict:
        try:
            return RazorpayGateway._refund(payment_id, {
                "amount": amount_in_paise,
                "notes": {"reason": reason},
            })
        except BusinessLogicException:
            raise
        except Exception as e:
            logger.error(f"Razorpay refund failed for {payment_id}: {e}")
            raise BusinessLogicException(f"Refund failed: {e}", code="refund_failed")

    @staticmethod
    def verify_payment_signature(razorpay_order_id: str, razorpay_payment_id: str, signature: str) -> bool:
        """
        HMAC-SHA256 of "<order_id>|<payment_id>" keyed with the API secret.
        """
        try:
            RazorpayGateway.get_client().utility.verify_payment_signature({
                "razorpay_order_id": razorpay_order_id,
                "razorpay_payment_id": razorpay_payment_id,
                "razorpay_signature": signature,
            })
            return True
        except razorpay.errors.SignatureVerificationError:
            return False

    @staticmethod
    def verify_webhook_signature(body: str, signature: str) -> bool:
        secret = settings.RAZORPAY_WEBHOOK_SECRET
        if not signature or not secret:
            return False
        try:
            RazorpayGateway.get_client().utility.verify_webhook_signature(body, signature, secret)
            return True
        except razorpay.errors.SignatureVerificationError:
            return False
