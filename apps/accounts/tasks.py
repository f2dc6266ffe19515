from celery import shared_task
from django.conf import settings
from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=5)
def send_sms_task(self, phone: str, code: str):
    """
    Sends a phone verification OTP via Twilio.
    Retries on network failure and Twilio 5xx.
    """
    message_body = (
        f"Your {settings.PROJECT_NAME} verification code is: {code}. "
        f"It expires in {settings.OTP_EXPIRY_MINUTES} minutes. Do not share this with anyone."
    )

    if not all([settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_FROM_NUMBER]):
        if settings.DEBUG or settings.TESTING:
            logger.warning("Twilio credentials missing. Skipping SMS.")
            return "Skipped (Config Missing)"
        raise ValueError("Twilio configuration missing in Production!")

    try:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        message = client.messages.create(
            body=message_body,
            from_=settings.TWILIO_FROM_NUMBER,
            to=phone,
        )
        logger.info(f"SMS sent to {phone}. SID: {message.sid}")
        return message.sid

    except TwilioRestException as e:
        logger.error(f"Twilio Error: {e}")
        # Only retry server errors, not bad request (invalid number)
        if e.status and 500 <= e.status < 600:
            raise self.retry(exc=e)
        return f"Failed: {e.msg}"
    except (ConnectionError, TimeoutError) as e:
        logger.warning(f"SMS transport error, retrying: {e}")
        raise self.retry(exc=e)
