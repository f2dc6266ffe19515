import logging

from django.conf import settings
from django.db import transaction

from apps.notifications.services import send_email
from apps.utils.exceptions import BusinessLogicException
from .models import ContactForm, CallBack

logger = logging.getLogger(__name__)

KIND_CONTACT = "contact"
KIND_CALLBACK = "callback"


class SupportService:

    @staticmethod
    @transaction.atomic
    def submit_contact(name: str, email: str, message: str, phone: str = "") -> ContactForm:
        contact = ContactForm.objects.create(name=name, email=email, phone=phone or "", message=message)
        context = {"name": name, "email": email, "phone": phone or "", "message": message}

        send_email(
            event_key="contact_admin",
            recipient=settings.ADMIN_EMAIL,
            subject="New Contact Form Submission",
            template="emails/contact_admin.html",
            context=context,
        )
        send_email(
            event_key="contact_thanks",
            recipient=email,
            subject="Thank You for Contacting Kumbukkal Pepper Nursery",
            template="emails/contact_thanks.html",
            context=context,
        )
        logger.info(f"Contact form {contact.id} submitted")
        return contact

    @staticmethod
    def request_callback(user) -> CallBack:
        if user is None or not user.is_authenticated:
            raise BusinessLogicException("No user found with the id", code="user_not_found")

        callback = CallBack.objects.create(
            user=user,
            name=user.name,
            email=user.email,
            phone=user.phone,
        )
        logger.info(f"Callback {callback.id} requested", extra={"user_id": user.pk})
        return callback

    @staticmethod
    def list_callbacks(kind=None):
        model = CallBack if kind == KIND_CALLBACK else ContactForm
        return model.objects.order_by('-created_at')

    @staticmethod
    def delete_callback(pk: int, kind=None) -> None:
        model = CallBack if kind == KIND_CALLBACK else ContactForm
        deleted, _ = model.objects.filter(pk=pk).delete()
        if not deleted:
            raise BusinessLogicException("No callback with the id", code="callback_not_found")
        logger.info(f"{model.__name__} {pk} deleted by admin")
