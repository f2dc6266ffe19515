from django.conf import settings
from django.db import models

from apps.utils.models import TimestampedModel


class MonthlyInventory(TimestampedModel):
    """
    Sapling capacity the nursery opens for a delivery month.
    """
    month = models.CharField(max_length=7, unique=True, help_text="YYYY-MM")
    max_quantity = models.PositiveIntegerField()
    current_quantity = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True, db_index=True)
    reason = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ['month']
        verbose_name = "Monthly Inventory"
        verbose_name_plural = "Monthly Inventory"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_quantity__lte=models.F('max_quantity')),
                name='inventory_current_lte_max',
            ),
        ]

    @property
    def remaining_quantity(self):
        return max(0, self.max_quantity - self.current_quantity)

    def __str__(self):
        return f"{self.month} | {self.current_quantity}/{self.max_quantity}"


class InventoryStatusLog(TimestampedModel):
    """
    Immutable ledger of activate / deactivate toggles.
    """
    inventory = models.ForeignKey(
        MonthlyInventory,
        on_delete=models.CASCADE,
        related_name='status_logs'
    )
    active = models.BooleanField()
    reason = models.CharField(max_length=255, blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.inventory.month} -> {'active' if self.active else 'inactive'}"
