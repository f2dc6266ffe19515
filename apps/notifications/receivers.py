# apps/notifications/receivers.py
import logging

from django.conf import settings
from django.dispatch import receiver

from apps.orders.signals import order_created, order_refund_requested
from apps.payments.signals import payment_captured
from apps.utils.utils import format_paise, format_long_date
from .models import ValidSettings
from .services import send_email, notify_admin

logger = logging.getLogger(__name__)


def _order_context(order) -> dict:
    return {
        "order_id": order.order_id,
        "full_name": order.full_name,
        "email": order.email,
        "phone": order.phone,
        "product_name": order.product_name,
        "quantity": order.quantity,
        "total_amount": format_paise(order.total_amount_in_paise),
        "delivery_location": order.delivery_location,
        "delivery_address": order.delivery_address,
        "state": order.state,
        "district": order.district,
        "pincode": order.pincode,
        "delivery_date": format_long_date(order.delivery_date),
        "payment_method": order.payment_method,
        "status": order.status,
        "refund_status": order.refund_status,
        "delivery_period": settings.DELIVERY_PERIOD,
    }


def _load_order(order_id):
    from apps.orders.models import Order

    try:
        return Order.objects.get(pk=order_id)
    except Order.DoesNotExist:
        logger.exception("Order %s not found for notification", order_id)
        return None


@receiver(order_created)
def handle_order_created(sender, order_id, **kwargs):
    """
    New storefront order -> admin email (new_bookings toggle).
    """
    order = _load_order(order_id)
    if order is None:
        return

    notify_admin(
        ValidSettings.NEW_BOOKINGS,
        event_key="admin_new_order",
        subject=f"🛒 New Order Received - {order.order_id}",
        template="emails/admin_new_order.html",
        context=_order_context(order),
    )


@receiver(payment_captured)
def handle_payment_captured(sender, order_id, source="checkout", **kwargs):
    """
    Payment captured -> customer confirmation, admin copy (payment_confirmations toggle).
    """
    order = _load_order(order_id)
    if order is None:
        return

    context = _order_context(order)
    send_email(
        event_key="customer_order_confirmation",
        recipient=order.email,
        subject=f"🌱 Thank You for Your Order - {order.order_id}",
        template="emails/customer_order_confirmation.html",
        context=context,
    )
    notify_admin(
        ValidSettings.PAYMENT_CONFIRMATIONS,
        event_key="admin_payment_confirmation",
        subject=f"Payment Received - {order.order_id}",
        template="emails/admin_new_order.html",
        context={**context, "payment_source": source},
    )


@receiver(order_refund_requested)
def handle_order_refund_requested(sender, order_id, reason="", **kwargs):
    order = _load_order(order_id)
    if order is None:
        return

    context = _order_context(order)
    context.update({
        "reason": reason or "",
        "refund_request_date": format_long_date(order.refund_request_date) if order.refund_request_date else "",
    })
    send_email(
        event_key="refund_request",
        recipient=settings.ADMIN_EMAIL,
        subject=f"Refund Request Raised - Order {order.order_id}",
        template="emails/refund_request.html",
        context=context,
    )
