from datetime import timedelta
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone
from apps.utils.models import TimestampedModel
from .managers import UserManager


class User(AbstractBaseUser, PermissionsMixin, TimestampedModel):
    """
    Customers and nursery admins share one table.
    Email is the login identifier; ``is_staff`` marks an admin.
    """
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=15, blank=True, default="", db_index=True)
    phone_verified = models.BooleanField(default=False)

    # OAuth identity (empty for password accounts)
    provider = models.CharField(max_length=20, blank=True, default="")
    provider_id = models.CharField(max_length=255, blank=True, default="")

    # Password recovery OTP
    otp = models.CharField(max_length=6, blank=True, null=True)
    otp_expires_at = models.DateTimeField(null=True, blank=True)
    otp_verified_at = models.DateTimeField(null=True, blank=True)

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    def clear_otp(self):
        self.otp = None
        self.otp_expires_at = None
        self.otp_verified_at = None


class PhoneOTP(models.Model):
    """
    SMS one-time codes for phone verification.
    """
    MAX_ATTEMPTS = 3

    phone = models.CharField(max_length=15, db_index=True)
    code = models.CharField(max_length=6)
    attempts = models.PositiveSmallIntegerField(default=0)
    is_used = models.BooleanField(default=False)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.phone} ({'used' if self.is_used else 'open'})"

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @classmethod
    def issue(cls, phone, code, ttl_minutes):
        # Older open codes for the same phone stop working
        cls.objects.filter(phone=phone, is_used=False).update(is_used=True)
        return cls.objects.create(
            phone=phone,
            code=code,
            expires_at=timezone.now() + timedelta(minutes=ttl_minutes),
        )
