from django import forms
from django.core.exceptions import ValidationError
from django_filters import rest_framework as filters

from .models import Location

STATUS_VALUES = {
    "true": True, "1": True, "yes": True, "active": True,
    "false": False, "0": False, "no": False, "inactive": False,
}


class LocationStatusField(forms.CharField):
    """Accepts true/false style words as well as active/inactive."""
    default_error_messages = {"invalid": "Enter a valid status value"}

    def to_python(self, value):
        value = super().to_python(value).strip().lower()
        if not value:
            return None
        if value not in STATUS_VALUES:
            raise ValidationError(self.error_messages["invalid"], code="invalid")
        return STATUS_VALUES[value]


class LocationStatusFilter(filters.Filter):
    field_class = LocationStatusField


class LocationFilter(filters.FilterSet):
    state = filters.CharFilter(field_name='state', lookup_expr='icontains')
    status = LocationStatusFilter(field_name='is_active')

    class Meta:
        model = Location
        fields = ['state', 'status']
