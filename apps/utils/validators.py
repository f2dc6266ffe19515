import re
from datetime import datetime
from rest_framework import serializers

PHONE_PATTERN = re.compile(r"^\+?\d{7,15}$")
STRONG_PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"
)
MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_phone(value):
    if not PHONE_PATTERN.match(str(value)):
        raise serializers.ValidationError("Invalid phone number format.")
    return value


def validate_strong_password(value):
    if not STRONG_PASSWORD_PATTERN.match(str(value)):
        raise serializers.ValidationError(
            "Password must be at least 8 characters long and include uppercase, "
            "lowercase, number and special character (@$!%*?&)."
        )
    return value


def validate_month(value):
    """YYYY-MM, e.g. 2025-03."""
    if not MONTH_PATTERN.match(str(value)):
        raise serializers.ValidationError("Month must be in YYYY-MM format.")
    datetime.strptime(value, "%Y-%m")
    return value
