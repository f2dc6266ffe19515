from rest_framework import serializers

from apps.utils.validators import validate_phone
from .models import ContactForm, CallBack


class ContactFormSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=255, error_messages={"blank": "Name is required"})
    email = serializers.EmailField(error_messages={"invalid": "Invalid email format"})
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    message = serializers.CharField(error_messages={"blank": "Message is required"})

    class Meta:
        model = ContactForm
        fields = ['id', 'name', 'email', 'phone', 'message', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_phone(self, value):
        return validate_phone(value) if value else value


class CallBackSerializer(serializers.ModelSerializer):
    class Meta:
        model = CallBack
        fields = ['id', 'user', 'name', 'email', 'phone', 'created_at']
        read_only_fields = fields
