from django.conf import settings
from django.db import models

from apps.utils.models import TimestampedModel


class ContactForm(TimestampedModel):
    """
    Website "contact us" submission.
    """
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True, default="")
    message = models.TextField()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} <{self.email}>"


class CallBack(TimestampedModel):
    """
    Logged-in customer asked to be called back.
    Contact fields are copied at request time so later profile edits don't rewrite history.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='callbacks'
    )
    name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Callback for {self.name or self.email}"
