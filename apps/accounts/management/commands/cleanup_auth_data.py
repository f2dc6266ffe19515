from django.core.management.base import BaseCommand
from django.utils import timezone
from datetime import timedelta

from apps.accounts.models import PhoneOTP, User


class Command(BaseCommand):
    help = "Delete stale phone OTPs and clear expired password recovery codes"

    def add_arguments(self, parser):
        parser.add_argument("--hours", type=int, default=1, help="Keep phone OTPs newer than this")

    def handle(self, *args, **options):
        now = timezone.now()
        otp_threshold = now - timedelta(hours=options["hours"])
        deleted_otps, _ = PhoneOTP.objects.filter(created_at__lt=otp_threshold).delete()

        cleared = User.objects.filter(otp_expires_at__lt=now).update(
            otp=None, otp_expires_at=None, otp_verified_at=None,
        )

        self.stdout.write(
            self.style.SUCCESS(
                f"Deleted {deleted_otps} phone OTPs and cleared {cleared} expired recovery codes."
            )
        )
