import re
import uuid
import time
import hashlib
import logging
import os
from decimal import Decimal, ROUND_FLOOR

from django.conf import settings
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.payments.gateway import RazorpayGateway
from apps.payments.models import Payment, PaymentStatus
from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import store_upload
from .models import (
    Order, ProgressTracker, OrderStatus, OrderRefundStatus, StageType, StageStatus, ORDER_ID_PREFIX,
)
from .signals import order_created, order_refund_requested

logger = logging.getLogger(__name__)

ORDER_ID_PATTERN = re.compile(rf"^{ORDER_ID_PREFIX}(\d{{4}})-(\d+)$")
MAX_ORDER_ID_ATTEMPTS = 3

# Stages an admin may move an order to; earlier stages are completed on the way
ADMIN_STAGE_TARGETS = (StageType.GROWTH_PHASE, StageType.READY_FOR_DISPATCH, StageType.DELIVERED)
STAGE_ORDER = list(StageType)


class OrderIdGenerator:
    """
    Sequential, year-scoped public order ids: KP2025-0001, KP2025-0002, ...
    The sequence restarts at 1 every calendar year.
    """

    @staticmethod
    def next_after(last_order_id, year: int) -> str:
        sequence = 1
        match = ORDER_ID_PATTERN.match(last_order_id or "")
        if match and int(match.group(1)) == year:
            sequence = int(match.group(2)) + 1
        return f"{ORDER_ID_PREFIX}{year}-{sequence:04d}"

    @staticmethod
    def generate() -> str:
        """
        Must run inside a transaction: the newest order row stays locked until commit.
        """
        last = (
            Order.objects.select_for_update()
            .order_by('-created_at', '-pk')
            .values_list('order_id', flat=True)
            .first()
        )
        return OrderIdGenerator.next_after(last, timezone.localdate().year)


def compute_total_in_paise(price_per_unit, quantity: int) -> int:
    total = (Decimal(str(price_per_unit)) * quantity * 100).to_integral_value(rounding=ROUND_FLOOR)
    return int(total)


def _create_with_order_id(build):
    """
    Runs ``build(order_id)`` in its own transaction, retrying when a concurrent
    writer took the same order id first.
    """
    for attempt in range(1, MAX_ORDER_ID_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                return build(OrderIdGenerator.generate())
        except IntegrityError:
            if attempt == MAX_ORDER_ID_ATTEMPTS:
                raise
            logger.warning(f"Order id collision, retrying ({attempt}/{MAX_ORDER_ID_ATTEMPTS})")


class ProgressService:

    @staticmethod
    def create_pending(order) -> ProgressTracker:
        return ProgressTracker.objects.create(order=order, current_stage=None, progress_percentage=0)

    @staticmethod
    def mark_confirmed(order, at=None) -> ProgressTracker:
        """
        Payment confirmed: ORDER_CONFIRMED done, nursery allocation begins (20%).
        """
        at = at or timezone.now()
        tracker, _ = ProgressTracker.objects.select_for_update().get_or_create(order=order)
        tracker.complete_stage(StageType.ORDER_CONFIRMED, started_at=order.created_at, at=at)
        tracker.start_stage(StageType.NURSERY_ALLOCATION, at=at)
        tracker.move_to(StageType.NURSERY_ALLOCATION)
        tracker.save()
        return tracker

    @staticmethod
    def advance(order, target: str) -> ProgressTracker:
        try:
            target = StageType(target)
        except ValueError:
            target = None
        if target not in ADMIN_STAGE_TARGETS:
            raise BusinessLogicException(
                "Invalid status value. Status must be one of: GROWTH_PHASE, READY_FOR_DISPATCH, DELIVERED",
                code="invalid_status",
            )

        tracker, _ = ProgressTracker.objects.select_for_update().get_or_create(order=order)
        if tracker.current_stage and STAGE_ORDER.index(StageType(tracker.current_stage)) >= STAGE_ORDER.index(target):
            raise BusinessLogicException(
                f"Order is already at {tracker.current_stage}", code="invalid_transition"
            )

        now = timezone.now()
        current = STAGE_ORDER.index(StageType(tracker.current_stage)) if tracker.current_stage else 0
        for stage in STAGE_ORDER[current:STAGE_ORDER.index(target)]:
            if tracker.stage_status(stage) != StageStatus.COMPLETED:
                tracker.complete_stage(stage, at=now)
        if target == StageType.DELIVERED:
            tracker.complete_stage(StageType.DELIVERED, started_at=now, at=now)
        else:
            tracker.start_stage(target, at=now)
        tracker.move_to(target)
        tracker.save()
        return tracker


class OrderService:

    @staticmethod
    def create_order(user, data: dict) -> dict:
        """
        Storefront checkout:
        1. Price the order server-side and open a Razorpay order (outside the DB transaction)
        2. Store Order + Payment + ProgressTracker atomically under a fresh order id
        """
        if not data.get('terms_accepted', False):
            raise BusinessLogicException("terms_accepted must be true", code="terms_not_accepted")

        total = compute_total_in_paise(data['price_per_unit'], data['quantity'])
        if total <= 0:
            raise BusinessLogicException("Invalid order amount", code="invalid_amount")

        gateway_order = RazorpayGateway.create_order(
            amount_in_paise=total,
            receipt=f"receipt_{int(time.time() * 1000)}",
        )

        def build(order_id):
            order = Order.objects.create(
                order_id=order_id,
                user=user,
                total_amount_in_paise=total,
                status=OrderStatus.PENDING,
                **data,
            )
            Payment.objects.create(
                order=order,
                provider="razorpay",
                razorpay_order_id=gateway_order['id'],
                amount_in_paise=total,
                currency="INR",
                status=PaymentStatus.CREATED,
            )
            ProgressService.create_pending(order)
            return order

        order = _create_with_order_id(build)
        logger.info(
            f"Order {order.order_id} created for gateway order {gateway_order['id']}",
            extra={"order_id": order.order_id, "user_id": getattr(user, 'pk', None)},
        )
        order_created.send(sender=Order, order_id=order.pk)

        return {
            "order": order,
            "razorpay_key_id": settings.RAZORPAY_KEY_ID,
            "razorpay_order_id": gateway_order['id'],
            "amount": total,
            "currency": "INR",
        }

    @staticmethod
    def bulk_order(data: dict) -> Order:
        """
        Admin-entered offline order: already paid, no gateway payment row.
        """
        total = compute_total_in_paise(data['price_per_unit'], data['quantity'])

        def build(order_id):
            order = Order.objects.create(
                order_id=order_id,
                total_amount_in_paise=total,
                status=OrderStatus.PAID,
                is_bulk_upload=True,
                terms_accepted=True,
                **data,
            )
            ProgressService.mark_confirmed(order)
            return order

        order = _create_with_order_id(build)
        logger.info(f"Bulk order {order.order_id} created", extra={"order_id": order.order_id})
        return order

    @staticmethod
    def user_orders(user):
        return (
            Order.objects.filter(user=user, status=OrderStatus.PAID)
            .select_related('payment', 'progress_tracker', 'refund')
            .order_by('-created_at')
        )

    @staticmethod
    def get_user_order(user, pk: int) -> Order:
        try:
            return Order.objects.select_related('payment', 'progress_tracker').get(pk=pk, user=user)
        except Order.DoesNotExist:
            raise BusinessLogicException("No order found with the id", code="order_not_found")

    @staticmethod
    def confirm_payment(order: Order) -> bool:
        """
        PENDING -> PAID with tracker at nursery allocation.
        Returns False when the order was already confirmed (duplicate callback).
        """
        if order.status != OrderStatus.PENDING:
            logger.info(f"Order {order.order_id} already {order.status}, skipping confirmation")
            return False

        order.status = OrderStatus.PAID
        order.save(update_fields=['status', 'updated_at'])
        ProgressService.mark_confirmed(order)
        logger.info(f"Order {order.order_id} confirmed", extra={"order_id": order.order_id})
        return True

    @staticmethod
    def request_refund(user, order_pk: int, reason: str, files=None) -> Order:
        try:
            order = Order.objects.get(pk=order_pk, user=user)
        except Order.DoesNotExist:
            raise BusinessLogicException("No order found with the id", code="order_not_found")

        if not order.can_request_refund:
            raise BusinessLogicException(
                "Refund can only be requested for paid orders", code="invalid_order_state"
            )

        previous = (order.metadata or {}).get('refund_request', {})
        known = {img['hash']: img['url'] for img in previous.get('images', []) if img.get('hash')}

        images = []
        for uploaded in files or []:
            digest = hashlib.md5()
            for chunk in uploaded.chunks():
                digest.update(chunk)
            file_hash = digest.hexdigest()

            url = known.get(file_hash)
            if url is None:
                ext = os.path.splitext(uploaded.name or "")[1].lstrip(".") or "bin"
                path = f"refunds/{order.order_id}/{int(time.time() * 1000)}-{uuid.uuid4()}.{ext}"
                try:
                    url = store_upload(uploaded, path)
                except OSError as e:
                    logger.error(f"Refund evidence upload failed for {order.order_id}: {e}")
                    raise BusinessLogicException(
                        "Failed to upload refund images", code="upload_failed", status_code=500
                    )
                known[file_hash] = url
            images.append({"url": url, "hash": file_hash})

        now = timezone.now()
        with transaction.atomic():
            order = Order.objects.select_for_update().get(pk=order.pk)
            if not order.can_request_refund:
                raise BusinessLogicException(
                    "Refund can only be requested for paid orders", code="invalid_order_state"
                )
            order.metadata = {
                **(order.metadata or {}),
                "refund_request": {
                    "reason": reason,
                    "images": images,
                    "requested_at": now.isoformat(),
                },
            }
            order.status = OrderStatus.REFUNDED
            order.refund_request_date = now
            order.refund_status = OrderRefundStatus.PENDING
            order.save(update_fields=[
                'metadata', 'status', 'refund_request_date', 'refund_status', 'updated_at',
            ])

        logger.info(f"Refund requested for order {order.order_id}", extra={"order_id": order.order_id})
        order_refund_requested.send(sender=Order, order_id=order.pk, reason=reason)
        return order


class OrderAdminService:
    """
    Admin dashboard order management.
    """

    @staticmethod
    def paid_orders():
        return (
            Order.objects.filter(status=OrderStatus.PAID)
            .select_related('progress_tracker')
            .order_by('-created_at')
        )

    @staticmethod
    def get_order(pk: int) -> Order:
        try:
            return Order.objects.select_related('payment', 'progress_tracker', 'refund', 'user').get(pk=pk)
        except Order.DoesNotExist:
            raise BusinessLogicException("No order with the id", code="order_not_found")

    @staticmethod
    def delete_order(pk: int) -> None:
        deleted, _ = Order.objects.filter(pk=pk).delete()
        if not deleted:
            raise BusinessLogicException("No order with the id", code="order_not_found")
        logger.info(f"Order {pk} deleted by admin")

    @staticmethod
    @transaction.atomic
    def update_order_status(pk: int, status: str) -> ProgressTracker:
        try:
            order = Order.objects.select_for_update().get(pk=pk)
        except Order.DoesNotExist:
            raise BusinessLogicException("No order with the id", code="order_not_found")

        if order.status != OrderStatus.PAID:
            raise BusinessLogicException(
                "Only paid orders can move through fulfilment", code="invalid_order_state"
            )

        tracker = ProgressService.advance(order, status)
        logger.info(
            f"Order {order.order_id} moved to {tracker.current_stage}",
            extra={"order_id": order.order_id},
        )
        return tracker
