# apps/notifications/services.py
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import start_of_day, end_of_day, month_start
from .models import EmailNotification, NotificationSettings, ValidSettings

logger = logging.getLogger(__name__)

SUMMARY_RANGES = ("daily", "weekly", "monthly")


def send_email(event_key: str, recipient: str, subject: str, template: str, context: dict | None = None):
    """
    Main entry point for other apps.

    Stores an EmailNotification row and hands it to Celery once the
    surrounding transaction commits.

    Example usage:
        send_email(
            event_key="admin_new_order",
            recipient=settings.ADMIN_EMAIL,
            subject="New Order Received",
            template="emails/admin_new_order.html",
            context={"order_id": order.order_id},
        )
    """
    from .tasks import send_email_task

    if not recipient:
        logger.warning("Email for event=%s skipped (no recipient)", event_key)
        return None

    email = EmailNotification.objects.create(
        event_key=event_key,
        recipient=recipient,
        subject=subject,
        template=template,
        context=context or {},
    )
    transaction.on_commit(lambda: send_email_task.delay(email.id))
    return email


def notify_admin(setting: str, event_key: str, subject: str, template: str, context: dict):
    """
    Admin email gated by a NotificationSettings toggle.
    """
    if not NotificationSettings.load().is_enabled(setting):
        logger.info("Admin email for event=%s skipped (%s disabled)", event_key, setting)
        return None
    return send_email(event_key, settings.ADMIN_EMAIL, subject, template, context)


def get_settings() -> NotificationSettings:
    return NotificationSettings.load()


@transaction.atomic
def toggle_setting(field: str) -> NotificationSettings:
    if field not in ValidSettings.values:
        raise BusinessLogicException("Invalid field name", code="invalid_field")

    row = NotificationSettings.objects.select_for_update().filter(pk=NotificationSettings.singleton_id).first()
    if row is None:
        raise BusinessLogicException("Settings record not found", code="settings_not_found", status_code=404)

    setattr(row, field, not getattr(row, field))
    row.save(update_fields=[field, "updated_at"])
    logger.info(f"Notification setting {field} set to {getattr(row, field)}")
    return row


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

def summary_window(range_name: str, today=None):
    today = today or timezone.localdate()
    if range_name == "daily":
        first = today
    elif range_name == "weekly":
        first = today - timedelta(days=6)
    elif range_name == "monthly":
        first = month_start(start_of_day(today)).date()
    else:
        raise BusinessLogicException("Invalid summary range", code="invalid_range")
    return start_of_day(first), end_of_day(today)


def _readable(day) -> str:
    # March 7, 2025
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def summary(range_name: str) -> dict:
    from apps.orders.models import Order, OrderStatus
    from apps.payments.models import Payment, PaymentStatus

    start, end = summary_window(range_name)
    in_range = {"created_at__gte": start, "created_at__lte": end}

    visitors = get_user_model().objects.customers().filter(**in_range).count()
    orders = Order.objects.filter(status=OrderStatus.PAID, **in_range).count()
    revenue = (
        Payment.objects.filter(status=PaymentStatus.CAPTURED, **in_range)
        .aggregate(total=Sum("amount_in_paise"))["total"] or 0
    )
    pending = (
        Order.objects.filter(status=OrderStatus.PENDING, **in_range)
        .aggregate(total=Sum("total_amount_in_paise"))["total"] or 0
    )

    return {
        "visitors": visitors,
        "orders": orders,
        "total_revenue": revenue,
        "total_pending_revenue": pending,
        "period": f"{_readable(timezone.localtime(start))} - {_readable(timezone.localtime(end))}",
    }


def send_summary_report(range_name: str):
    """
    Emails the summary to the admin when the matching toggle is on.
    """
    from apps.utils.utils import format_paise

    toggle = f"{range_name}_summary"
    if not NotificationSettings.load().is_enabled(toggle):
        logger.info(f"{range_name} summary skipped ({toggle} disabled)")
        return None

    data = summary(range_name)
    label = range_name.capitalize()
    return send_email(
        event_key=toggle,
        recipient=settings.ADMIN_EMAIL,
        subject=f"Kumbukkal Pepper Nursery - {label} Summary Report ({data['period']})",
        template="emails/summary_report.html",
        context={
            **data,
            "label": label,
            "total_revenue_display": format_paise(data["total_revenue"]),
            "total_pending_revenue_display": format_paise(data["total_pending_revenue"]),
            "dashboard_url": f"{settings.FRONTEND_URL}/dashboard",
        },
    )
