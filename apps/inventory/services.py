import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from apps.utils.exceptions import BusinessLogicException
from .models import MonthlyInventory, InventoryStatusLog

logger = logging.getLogger(__name__)


def _check_quantities(max_quantity, current_quantity):
    if current_quantity > max_quantity:
        raise BusinessLogicException(
            "Current quantity cannot exceed maximum quantity", code="invalid_quantity"
        )


class InventoryService:
    """
    Monthly capacity management.
    ALL capacity changes must pass through here.
    """

    @staticmethod
    def create(month: str, max_quantity: int, current_quantity: int = 0,
               active: bool = True, reason: str = None) -> MonthlyInventory:
        if MonthlyInventory.objects.filter(month=month).exists():
            raise BusinessLogicException(
                "Inventory already exists for this month", code="inventory_exists"
            )
        _check_quantities(max_quantity, current_quantity)

        try:
            with transaction.atomic():
                inventory = MonthlyInventory.objects.create(
                    month=month,
                    max_quantity=max_quantity,
                    current_quantity=current_quantity,
                    active=active,
                    reason=reason,
                )
        except IntegrityError:
            raise BusinessLogicException(
                "Inventory already exists for this month", code="inventory_exists"
            )
        logger.info(f"Inventory created for {month} (max {max_quantity})")
        return inventory

    @staticmethod
    def list_all():
        return MonthlyInventory.objects.order_by('month')

    @staticmethod
    def get_by_month(month: str) -> MonthlyInventory:
        try:
            return MonthlyInventory.objects.get(month=month)
        except MonthlyInventory.DoesNotExist:
            raise BusinessLogicException("No inventory found for the month", code="inventory_not_found")

    @staticmethod
    @transaction.atomic
    def update(month: str, data: dict) -> MonthlyInventory:
        try:
            inventory = MonthlyInventory.objects.select_for_update().get(month=month)
        except MonthlyInventory.DoesNotExist:
            raise BusinessLogicException("No inventory found for the month", code="inventory_not_found")

        new_month = data.get('month', inventory.month)
        if new_month != inventory.month and MonthlyInventory.objects.filter(month=new_month).exists():
            raise BusinessLogicException(
                "Inventory already exists for this month", code="inventory_exists"
            )

        for field in ('month', 'max_quantity', 'current_quantity', 'active', 'reason'):
            if field in data:
                setattr(inventory, field, data[field])
        _check_quantities(inventory.max_quantity, inventory.current_quantity)

        inventory.save()
        return inventory

    @staticmethod
    def delete(pk: int) -> None:
        deleted, _ = MonthlyInventory.objects.filter(pk=pk).delete()
        if not deleted:
            raise BusinessLogicException("No inventory with the id", code="inventory_not_found")
        logger.info(f"Inventory {pk} deleted")

    @staticmethod
    @transaction.atomic
    def toggle_status(pk: int, reason: str = "", user=None) -> MonthlyInventory:
        try:
            inventory = MonthlyInventory.objects.select_for_update().get(pk=pk)
        except MonthlyInventory.DoesNotExist:
            raise BusinessLogicException("No inventory with the id", code="inventory_not_found")

        inventory.active = not inventory.active
        inventory.reason = reason or None
        inventory.save(update_fields=['active', 'reason', 'updated_at'])

        InventoryStatusLog.objects.create(
            inventory=inventory,
            active=inventory.active,
            reason=reason or "",
            created_by=user if getattr(user, 'is_authenticated', False) else None,
        )
        logger.info(
            f"Inventory {inventory.month} {'activated' if inventory.active else 'deactivated'}"
        )
        return inventory

    @staticmethod
    def available_months():
        """
        Storefront booking calendar: active months that still have capacity.
        """
        return (
            MonthlyInventory.objects
            .filter(active=True, current_quantity__lt=F('max_quantity'))
            .order_by('month')
        )
