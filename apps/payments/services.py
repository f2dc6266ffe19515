import logging

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.orders.models import Order, OrderStatus, OrderRefundStatus
from apps.orders.services import OrderService
from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import add_months, apply_date_range, date_range, start_of_day, end_of_day
from .gateway import RazorpayGateway
from .models import Payment, PaymentStatus, Refund, RefundStatus, WebhookLog
from .signals import payment_captured

logger = logging.getLogger(__name__)

FULL_REFUND_REASON = "Full refund requested"


class PaymentService:
    """
    Service to handle Payment Lifecycle.
    """

    @staticmethod
    def verify_payment(user, order_pk: int, razorpay_payment_id: str, razorpay_order_id: str,
                       razorpay_signature: str) -> Order:
        """
        Checkout callback: the browser hands back Razorpay's payment id + signature.
        """
        try:
            order = Order.objects.select_related('payment').get(pk=order_pk, user=user)
        except Order.DoesNotExist:
            raise BusinessLogicException("No order found with the id", code="order_not_found")

        payment = getattr(order, 'payment', None)
        if payment is None:
            raise BusinessLogicException("Payment not found for this order", code="payment_not_found")
        if payment.razorpay_order_id != razorpay_order_id:
            raise BusinessLogicException("Payment does not belong to this order", code="order_mismatch")

        if not RazorpayGateway.verify_payment_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            logger.warning(f"Invalid payment signature for order {order.order_id}")
            raise BusinessLogicException("Invalid payment signature", code="invalid_signature")

        with transaction.atomic():
            payment = Payment.objects.select_for_update().get(pk=payment.pk)
            newly_captured = payment.status != PaymentStatus.CAPTURED
            if newly_captured:
                payment.status = PaymentStatus.CAPTURED
                payment.razorpay_payment_id = razorpay_payment_id
                payment.razorpay_signature = razorpay_signature
                payment.save(update_fields=['status', 'razorpay_payment_id', 'razorpay_signature', 'updated_at'])

            order = Order.objects.select_for_update().get(pk=order.pk)
            confirmed = OrderService.confirm_payment(order)

        if newly_captured or confirmed:
            payment_captured.send(sender=Payment, order_id=order.pk, source="checkout")
        logger.info(f"Payment verified for order {order.order_id}", extra={"order_id": order.order_id})
        return order


class WebhookService:
    """
    Idempotent processor for Razorpay webhooks.
    Handles: payment.captured, payment.failed, refund.processed, refund.failed
    """

    @staticmethod
    def event_id_for(event_data: dict, header_event_id: str = None) -> str:
        if header_event_id:
            return header_event_id
        event = event_data.get('event', '')
        payload = event_data.get('payload', {}) or {}
        entity_id = ''
        for key in ('refund', 'payment'):
            entity = (payload.get(key) or {}).get('entity') or {}
            if entity.get('id'):
                entity_id = entity['id']
                break
        return f"{event}:{entity_id}"

    @staticmethod
    def process(event_data: dict, header_event_id: str = None) -> str:
        event_type = event_data.get('event', '')
        event_id = WebhookService.event_id_for(event_data, header_event_id)
        handler = WebhookService.HANDLERS.get(event_type)

        if handler is None:
            logger.info(f"Ignoring webhook event {event_type}")
            return "ignored"

        captured_order = None
        with transaction.atomic():
            webhook_log, _ = WebhookLog.objects.select_for_update().get_or_create(
                event_id=event_id,
                defaults={'event': event_type, 'payload': event_data},
            )
            if webhook_log.is_processed:
                logger.info(f"Skipping duplicate webhook event: {event_id}")
                return "duplicate"

            payload = event_data.get('payload', {}) or {}
            captured_order = handler(payload)

            # Unknown references are logged inside the handler and still marked
            # processed so the gateway stops redelivering them.
            webhook_log.is_processed = True
            webhook_log.save(update_fields=['is_processed', 'updated_at'])

        if captured_order is not None:
            payment_captured.send(sender=Payment, order_id=captured_order.pk, source="webhook")
        logger.info(f"Processed webhook {event_type} ({event_id})", extra={"event_id": event_id})
        return "processed"

    @staticmethod
    def _payment_entity(payload):
        return (payload.get('payment') or {}).get('entity') or {}

    @staticmethod
    def _refund_entity(payload):
        return (payload.get('refund') or {}).get('entity') or {}

    @staticmethod
    def _handle_payment_captured(payload):
        entity = WebhookService._payment_entity(payload)
        try:
            payment = Payment.objects.select_for_update().select_related('order').get(
                razorpay_order_id=entity.get('order_id')
            )
        except Payment.DoesNotExist:
            logger.error(f"Payment not found for gateway order: {entity.get('order_id')}")
            return None

        was_captured = payment.status == PaymentStatus.CAPTURED
        payment.status = PaymentStatus.CAPTURED
        payment.razorpay_payment_id = entity.get('id') or payment.razorpay_payment_id
        payment.save(update_fields=['status', 'razorpay_payment_id', 'updated_at'])

        order = Order.objects.select_for_update().get(pk=payment.order_id)
        confirmed = OrderService.confirm_payment(order)
        return order if (confirmed or not was_captured) else None

    @staticmethod
    def _handle_payment_failed(payload):
        entity = WebhookService._payment_entity(payload)
        updated = (
            Payment.objects.filter(razorpay_order_id=entity.get('order_id'))
            .exclude(status=PaymentStatus.CAPTURED)
            .update(status=PaymentStatus.FAILED, razorpay_payment_id=entity.get('id'), updated_at=timezone.now())
        )
        if not updated:
            logger.warning(f"payment.failed for unknown or captured gateway order {entity.get('order_id')}")
        return None

    @staticmethod
    def _find_refund(entity):
        """
        Looks the refund up by gateway id, falling back to a reserved row
        (approval still waiting on the gateway response) for the same payment.
        """
        if not entity.get('id'):
            return None
        refund = Refund.objects.select_for_update().filter(refund_id=entity['id']).first()
        if refund is None and entity.get('payment_id'):
            refund = (
                Refund.objects.select_for_update()
                .filter(refund_id__isnull=True, order__payment__razorpay_payment_id=entity['payment_id'])
                .first()
            )
            if refund is not None:
                refund.refund_id = entity['id']
        return refund

    @staticmethod
    def _handle_refund_processed(payload):
        entity = WebhookService._refund_entity(payload)
        refund = WebhookService._find_refund(entity)
        if refund is None:
            logger.error(f"Refund not found for refund.processed: {entity.get('id')}")
            return None

        refund.status = RefundStatus.SUCCESS
        refund.processed_at = timezone.now()
        refund.metadata = entity
        refund.save(update_fields=['refund_id', 'status', 'processed_at', 'metadata', 'updated_at'])
        Payment.objects.filter(order_id=refund.order_id).update(
            status=PaymentStatus.REFUNDED, updated_at=timezone.now()
        )
        return None

    @staticmethod
    def _handle_refund_failed(payload):
        entity = WebhookService._refund_entity(payload)
        refund = WebhookService._find_refund(entity)
        if refund is None:
            logger.error(f"Refund not found for refund.failed: {entity.get('id')}")
            return None

        refund.status = RefundStatus.FAILED
        refund.failed_at = timezone.now()
        refund.failure_reason = entity.get('failure_reason') or 'Unknown'
        refund.metadata = entity
        refund.save(update_fields=['refund_id', 'status', 'failed_at', 'failure_reason', 'metadata', 'updated_at'])
        return None


WebhookService.HANDLERS = {
    'payment.captured': WebhookService._handle_payment_captured,
    'payment.failed': WebhookService._handle_payment_failed,
    'refund.processed': WebhookService._handle_refund_processed,
    'refund.failed': WebhookService._handle_refund_failed,
}


class RefundService:

    @staticmethod
    def _locked_order(order_pk: int) -> Order:
        # caller holds the transaction
        try:
            order = Order.objects.select_for_update().get(pk=order_pk)
        except Order.DoesNotExist:
            raise BusinessLogicException("No order found with the id", code="order_not_found")
        return order

    @staticmethod
    def _ensure_pending_request(order: Order) -> None:
        if order.status != OrderStatus.REFUNDED or order.refund_status != OrderRefundStatus.PENDING:
            raise BusinessLogicException(
                "No pending refund request for this order", code="refund_not_requested"
            )

    @staticmethod
    def approve_refund(order_pk: int) -> Refund:
        """
        1. Reserve a Refund row (INITIATED) while the order is locked
        2. Ask Razorpay for the full refund
        3. Record the gateway refund id; the row goes PROCESSING unless a webhook already settled it
        """
        with transaction.atomic():
            order = RefundService._locked_order(order_pk)
            payment = Payment.objects.filter(order=order).first()
            if payment is None:
                raise BusinessLogicException("Payment not found for this order", code="payment_not_found")

            if Refund.objects.filter(order=order).exists():
                raise BusinessLogicException("Refund already processed for this order", code="refund_exists")

            RefundService._ensure_pending_request(order)

            if payment.status != PaymentStatus.CAPTURED or not payment.razorpay_payment_id:
                raise BusinessLogicException("Payment not captured, cannot refund", code="payment_not_captured")

            amount = payment.amount_in_paise
            if not amount or amount <= 0:
                raise BusinessLogicException("Invalid refund amount", code="invalid_amount")

            refund = Refund.objects.create(order=order, amount_in_paise=amount, status=RefundStatus.INITIATED)

        try:
            gateway_refund = RazorpayGateway.refund(payment.razorpay_payment_id, amount, FULL_REFUND_REASON)
        except BusinessLogicException:
            refund.delete()
            raise

        with transaction.atomic():
            order = Order.objects.select_for_update().get(pk=order.pk)
            order.refund_status = OrderRefundStatus.APPROVED
            order.save(update_fields=['refund_status', 'updated_at'])

            refund = Refund.objects.select_for_update().get(pk=refund.pk)
            refund.refund_id = gateway_refund['id']
            refund.amount_in_paise = gateway_refund.get('amount', amount)
            if refund.status == RefundStatus.INITIATED:
                refund.status = RefundStatus.PROCESSING
                refund.metadata = gateway_refund
            refund.save(update_fields=['refund_id', 'amount_in_paise', 'status', 'metadata', 'updated_at'])

        logger.info(f"Refund {refund.refund_id} initiated for order {order.order_id}",
                    extra={"order_id": order.order_id})
        return refund

    @staticmethod
    @transaction.atomic
    def cancel_refund(order_pk: int) -> Order:
        order = RefundService._locked_order(order_pk)

        if Refund.objects.filter(order=order).exists():
            raise BusinessLogicException("Refund already processed for this order", code="refund_exists")
        RefundService._ensure_pending_request(order)

        order.refund_status = OrderRefundStatus.CANCELLED
        order.save(update_fields=['refund_status', 'updated_at'])
        logger.info(f"Refund request cancelled for order {order.order_id}", extra={"order_id": order.order_id})
        return order

    @staticmethod
    def refund_requests():
        return (
            Order.objects.filter(status=OrderStatus.REFUNDED)
            .select_related('refund', 'payment')
            .order_by('-refund_request_date')
        )

    @staticmethod
    def cancelled_refunds():
        return (
            Order.objects.filter(refund_status=OrderRefundStatus.CANCELLED)
            .select_related('refund')
            .order_by('-created_at')
        )

    @staticmethod
    def export_refunds():
        return Order.objects.select_related('refund').order_by('-created_at')

    @staticmethod
    def refund_cards(from_date=None, to_date=None) -> list:
        start, end = date_range(from_date, to_date)
        requested = Order.objects.filter(status=OrderStatus.REFUNDED)

        total_requests = apply_date_range(requested, 'refund_request_date', start, end).count()
        pending = apply_date_range(requested.filter(refund__isnull=True), 'refund_request_date', start, end).count()
        approved = apply_date_range(
            Refund.objects.filter(status__in=[
                RefundStatus.INITIATED, RefundStatus.PROCESSING, RefundStatus.SUCCESS,
            ]),
            'created_at', start, end,
        ).count()
        declined = apply_date_range(
            Order.objects.filter(refund_status=OrderRefundStatus.CANCELLED), 'created_at', start, end,
        ).count()

        return [
            {"title": "Total Requests", "value": total_requests, "bottom_text": "All refund requests"},
            {"title": "Pending", "value": pending, "bottom_text": "Needs attention"},
            {"title": "Approved", "value": approved, "bottom_text": "Processed"},
            {"title": "Declined", "value": declined, "bottom_text": "Rejected"},
        ]


class PaymentReportService:

    @staticmethod
    def payment_cards(from_date=None, to_date=None) -> list:
        start, end = date_range(from_date, to_date)
        if start is None:
            start = start_of_day(add_months(timezone.localdate(), -1))
        if end is None:
            end = end_of_day(timezone.localdate())

        orders = Order.objects.filter(created_at__gte=start, created_at__lte=end)
        paid = orders.filter(status=OrderStatus.PAID)

        revenue = paid.aggregate(total=Sum('total_amount_in_paise'))['total'] or 0
        refunded = (
            Refund.objects.filter(status=RefundStatus.SUCCESS, created_at__gte=start, created_at__lte=end)
            .aggregate(total=Sum('amount_in_paise'))['total'] or 0
        )

        return [
            {"title": "Total Revenue", "amount": revenue},
            {"title": "Successful Payments", "amount": paid.count()},
            {"title": "Pending Payments", "amount": orders.filter(status=OrderStatus.PENDING).count()},
            {"title": "Total Refunded", "amount": refunded},
        ]

    @staticmethod
    def transactions():
        return Order.objects.select_related('payment').order_by('-created_at')
