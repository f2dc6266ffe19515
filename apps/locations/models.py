from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel


class Location(TimestampedModel):
    """
    A deliverable (state, district) with its booking limits and sapling price.
    """
    state = models.CharField(max_length=100, validators=[MinLengthValidator(1)])
    district = models.CharField(max_length=100, validators=[MinLengthValidator(1)])
    pin_code = models.CharField(max_length=10, validators=[MinLengthValidator(3)])
    min_quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    max_quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_per_unit = models.DecimalField(max_digits=10, decimal_places=2)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['state', 'district'], name='unique_location_state_district'),
            models.CheckConstraint(
                condition=models.Q(max_quantity__gte=models.F('min_quantity')),
                name='location_max_gte_min',
            ),
        ]

    def __str__(self):
        return f"{self.district}, {self.state}"


class Pincode(models.Model):
    """
    Postal directory row (India Post office list).
    """
    pincode = models.CharField(max_length=10, db_index=True)
    office_name = models.CharField(max_length=255)
    district = models.CharField(max_length=100)
    state = models.CharField(max_length=100)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['pincode', 'office_name'], name='unique_pincode_office'),
        ]
        indexes = [
            models.Index(fields=['state', 'district'], name='pincode_state_district_idx'),
        ]

    def __str__(self):
        return f"{self.pincode} {self.office_name}"
