import secrets
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

from apps.utils.exceptions import BusinessLogicException
from .models import User, PhoneOTP
from .tasks import send_sms_task

logger = logging.getLogger(__name__)


def _generate_otp() -> str:
    # crypto-secure 6 digits
    return str(secrets.SystemRandom().randint(100000, 999999))


def issue_tokens(user, is_admin: bool) -> dict:
    refresh = RefreshToken.for_user(user)
    refresh['is_admin'] = is_admin
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


def login_payload(user, is_admin: bool = False) -> dict:
    return {
        "message": "Login successfull",
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "is_admin": is_admin,
            "token": issue_tokens(user, is_admin),
        },
    }


class AuthService:

    @staticmethod
    def otp_expiry_minutes() -> int:
        return settings.OTP_EXPIRY_MINUTES

    @staticmethod
    def _lookup(email: str, admins_only: bool = False):
        qs = User.objects.admins() if admins_only else User.objects.filter(is_active=True)
        return qs.filter(email__iexact=email.strip()).first()

    # ------------------------------------------------------------------
    # Email + password
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def register(name: str, email: str, password: str, phone: str = "") -> User:
        if User.objects.filter(email__iexact=email.strip()).exists():
            raise BusinessLogicException("Email already registered", code="email_taken")

        user = User.objects.create_user(email=email, password=password, name=name, phone=phone or "")
        logger.info(f"New user registered: {user.id}")
        return user

    @staticmethod
    def login(email: str, password: str) -> dict:
        user = AuthService._lookup(email)
        if user is None or user.is_staff or not user.check_password(password):
            raise BusinessLogicException(
                "Invalid credentials", code="invalid_credentials",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        return login_payload(user, is_admin=False)

    @staticmethod
    def admin_login(email: str, password: str) -> dict:
        admin = AuthService._lookup(email, admins_only=True)
        if admin is None:
            raise BusinessLogicException(
                "Invalid credentials", code="invalid_credentials",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        if not admin.check_password(password):
            raise BusinessLogicException(
                "Enter a valid password", code="invalid_password",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        admin.last_login = timezone.now()
        admin.save(update_fields=['last_login'])
        logger.info(f"Admin login: {admin.id}")
        return login_payload(admin, is_admin=True)

    # ------------------------------------------------------------------
    # Password recovery OTP (email)
    # ------------------------------------------------------------------

    @staticmethod
    def send_email_otp(email: str, admins_only: bool = False) -> None:
        from apps.notifications.services import send_email

        user = AuthService._lookup(email, admins_only)
        if user is None:
            raise BusinessLogicException("User not found", code="user_not_found")

        code = _generate_otp()
        user.otp = code
        user.otp_expires_at = timezone.now() + timedelta(minutes=AuthService.otp_expiry_minutes())
        user.otp_verified_at = None
        user.save(update_fields=['otp', 'otp_expires_at', 'otp_verified_at'])

        send_email(
            event_key="password_otp",
            recipient=user.email,
            subject="OTP for Password Recovery",
            template="emails/password_otp.html",
            context={
                "name": user.name or user.email,
                "otp": code,
                "expiry_minutes": AuthService.otp_expiry_minutes(),
            },
        )
        logger.info(f"Password recovery OTP issued for user {user.id}")

    @staticmethod
    def verify_email_otp(email: str, otp: str, admins_only: bool = False) -> None:
        user = AuthService._lookup(email, admins_only)
        if user is None:
            raise BusinessLogicException("User not found", code="user_not_found")

        if not user.otp or not user.otp_expires_at:
            raise BusinessLogicException("OTP not generated", code="otp_missing")

        if not secrets.compare_digest(user.otp, str(otp)):
            raise BusinessLogicException(
                "Invalid OTP", code="otp_invalid",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        if timezone.now() > user.otp_expires_at:
            raise BusinessLogicException("OTP expired", code="otp_expired")

        # Single use: the code is gone, the verification window stays open for reset
        user.otp = None
        user.otp_verified_at = timezone.now()
        user.save(update_fields=['otp', 'otp_verified_at'])

    @staticmethod
    def reset_password(email: str, new_password: str, admins_only: bool = False) -> None:
        user = AuthService._lookup(email, admins_only)
        if user is None:
            raise BusinessLogicException("User not found", code="user_not_found")

        window = timedelta(minutes=AuthService.otp_expiry_minutes())
        if not user.otp_verified_at or timezone.now() - user.otp_verified_at > window:
            raise BusinessLogicException("OTP not verified", code="otp_not_verified")

        if user.check_password(new_password):
            raise BusinessLogicException(
                "New password must be different from old password", code="password_reused"
            )

        user.set_password(new_password)
        user.clear_otp()
        user.save(update_fields=['password', 'otp', 'otp_expires_at', 'otp_verified_at'])
        logger.info(f"Password reset for user {user.id}")

    # ------------------------------------------------------------------
    # Phone OTP (SMS)
    # ------------------------------------------------------------------

    @staticmethod
    def request_phone_otp(phone: str) -> PhoneOTP:
        code = _generate_otp()
        otp = PhoneOTP.issue(phone, code, AuthService.otp_expiry_minutes())

        if settings.DEBUG:
            logger.debug(f"DEBUG OTP for {phone}: {code}")
        send_sms_task.delay(phone, code)
        return otp

    @staticmethod
    def verify_phone_otp(phone: str, code: str) -> bool:
        # The failed attempt must be committed before the error is raised
        with transaction.atomic():
            otp = (
                PhoneOTP.objects.select_for_update()
                .filter(phone=phone, is_used=False)
                .order_by('-created_at')
                .first()
            )
            if otp is None:
                raise BusinessLogicException("OTP not generated", code="otp_missing")

            if otp.is_expired:
                raise BusinessLogicException("OTP expired", code="otp_expired")

            matched = secrets.compare_digest(otp.code, str(code))
            if matched:
                otp.is_used = True
                otp.save(update_fields=['is_used'])
                User.objects.filter(phone=phone).update(phone_verified=True)
            else:
                otp.attempts += 1
                if otp.attempts >= PhoneOTP.MAX_ATTEMPTS:
                    otp.is_used = True
                otp.save(update_fields=['attempts', 'is_used'])

        if not matched:
            raise BusinessLogicException(
                "Invalid OTP", code="otp_invalid",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        return True

    # ------------------------------------------------------------------
    # Google sign-in
    # ------------------------------------------------------------------

    @staticmethod
    def google_login(token: str) -> dict:
        try:
            id_info = id_token.verify_oauth2_token(
                token,
                google_requests.Request(),
                settings.GOOGLE_CLIENT_ID,
            )
        except ValueError as e:
            logger.warning(f"Google token rejected: {e}")
            raise BusinessLogicException(
                "Invalid Google token", code="invalid_google_token",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        email = id_info.get('email')
        if not email or not id_info.get('email_verified', False):
            raise BusinessLogicException(
                "Google account email is not verified", code="email_unverified",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            user = User.objects.create_user(
                email=email,
                name=id_info.get('name', ''),
                provider='google',
                provider_id=id_info.get('sub', ''),
            )
            logger.info(f"User {user.id} created through Google sign-in")
        elif user.is_staff:
            raise BusinessLogicException(
                "Invalid credentials", code="invalid_credentials",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        elif not user.provider:
            user.provider = 'google'
            user.provider_id = id_info.get('sub', '')
            user.save(update_fields=['provider', 'provider_id'])

        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        return login_payload(user, is_admin=False)

    # ------------------------------------------------------------------
    # Admin profile
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def edit_admin_profile(admin, name: str, email: str, password: str, current_password: str = None) -> User:
        if User.objects.filter(email__iexact=email).exclude(pk=admin.pk).exists():
            raise BusinessLogicException("Email already registered", code="email_taken")

        if current_password is not None and not admin.check_password(current_password):
            raise BusinessLogicException("Current password is incorrect", code="invalid_password")

        if admin.check_password(password):
            raise BusinessLogicException(
                "New password must be different from old password", code="password_reused"
            )

        admin.name = name
        admin.email = email.lower()
        admin.set_password(password)
        admin.save(update_fields=['name', 'email', 'password', 'updated_at'])
        logger.info(f"Admin {admin.id} updated profile")
        return admin


class UserDirectoryService:
    """
    Admin-side queries over customer accounts.
    """

    @staticmethod
    def customers():
        return User.objects.customers().order_by('-created_at')

    @staticmethod
    def delete_user(user_id: int) -> None:
        deleted, _ = User.objects.customers().filter(pk=user_id).delete()
        if not deleted:
            raise BusinessLogicException("No user with the id", code="user_not_found")
        logger.info(f"User {user_id} deleted by admin")
