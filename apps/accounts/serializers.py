from rest_framework import serializers
from apps.utils.validators import validate_phone, validate_strong_password
from .models import User


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_strong_password])
    phone = serializers.CharField(max_length=15, required=False, allow_blank=True, validators=[validate_phone])


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class VerifyOTPSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.RegexField(r"^\d{6}$", error_messages={"invalid": "OTP must be 6 digits."})


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_strong_password])


class PhoneOTPRequestSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=15, validators=[validate_phone])


class PhoneOTPVerifySerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=15, validators=[validate_phone])
    otp = serializers.RegexField(r"^\d{6}$", error_messages={"invalid": "OTP must be 6 digits."})


class GoogleLoginSerializer(serializers.Serializer):
    token = serializers.CharField()


class AdminProfileSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_strong_password])
    current_password = serializers.CharField(write_only=True, required=False)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone', 'phone_verified', 'provider', 'created_at', 'updated_at']
        read_only_fields = fields


class UserExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'created_at', 'updated_at']
