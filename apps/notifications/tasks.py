import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from .models import EmailNotification, EmailStatus

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=10)
def send_email_task(self, email_id: int):
    try:
        with transaction.atomic():
            # Lock the row to prevent double sends
            email = EmailNotification.objects.select_for_update().get(id=email_id)

            if email.status == EmailStatus.SENT:
                return

            html = render_to_string(email.template, email.context)
            message = EmailMultiAlternatives(
                subject=email.subject,
                body=strip_tags(html),
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[email.recipient],
            )
            message.attach_alternative(html, "text/html")
            message.send(fail_silently=False)

            email.status = EmailStatus.SENT
            email.sent_at = timezone.now()
            email.error = ""
            email.save(update_fields=["status", "sent_at", "error", "updated_at"])
            logger.info(f"Email {email.event_key} sent to {email.recipient}")

    except EmailNotification.DoesNotExist:
        logger.error(f"EmailNotification {email_id} not found.")
    except Exception as exc:
        logger.exception(f"Failed to send email {email_id}")
        EmailNotification.objects.filter(id=email_id).update(
            status=EmailStatus.FAILED, error=str(exc)[:1000], updated_at=timezone.now()
        )
        self.retry(exc=exc)


@shared_task
def send_summary_report_task(range_name: str):
    from .services import send_summary_report

    send_summary_report(range_name)
