import os
from django.core.management.base import BaseCommand
from django.conf import settings
from django.contrib.auth import get_user_model


class Command(BaseCommand):
    help = "Create or update the nursery admin account from ADMIN_EMAIL / ADMIN_PASSWORD."

    def add_arguments(self, parser):
        parser.add_argument("--name", default="Nursery Admin")
        parser.add_argument(
            "--superuser",
            action="store_true",
            help="Also grant Django admin (superuser) rights.",
        )

    def handle(self, *args, **options):
        if not settings.DEBUG and not os.getenv("ALLOW_CREATE_ADMIN_IN_PROD") == "True":
            self.stderr.write(self.style.ERROR(
                "Production Lock: Set ALLOW_CREATE_ADMIN_IN_PROD=True to run this."
            ))
            return

        email = os.getenv("ADMIN_EMAIL")
        password = os.getenv("ADMIN_PASSWORD")

        if not email or not password:
            self.stderr.write(self.style.ERROR(
                "Missing ADMIN_EMAIL or ADMIN_PASSWORD env vars."
            ))
            return

        User = get_user_model()

        user, created = User.objects.get_or_create(
            email=email.lower(),
            defaults={"name": options["name"], "is_active": True},
        )

        user.is_staff = True
        user.is_superuser = options["superuser"] or user.is_superuser
        user.set_password(password)
        user.save()

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created admin: {email}"))
        else:
            self.stdout.write(self.style.WARNING(f"Updated admin: {email}"))
