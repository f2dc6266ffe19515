import logging

from django.db import IntegrityError, transaction

from apps.utils.exceptions import BusinessLogicException
from .models import Location, Pincode

logger = logging.getLogger(__name__)


class LocationService:

    @staticmethod
    def _get(pk: int) -> Location:
        try:
            return Location.objects.get(pk=pk)
        except Location.DoesNotExist:
            raise BusinessLogicException("No location with the id", code="location_not_found")

    @staticmethod
    def create(data: dict) -> Location:
        exists = Location.objects.filter(
            state__iexact=data['state'], district__iexact=data['district']
        ).exists()
        if exists:
            raise BusinessLogicException("Location already exists", code="location_exists")

        try:
            with transaction.atomic():
                location = Location.objects.create(**data)
        except IntegrityError:
            raise BusinessLogicException("Location already exists", code="location_exists")

        logger.info(f"Location {location.id} created ({location})")
        return location

    @staticmethod
    def edit(pk: int, data: dict) -> Location:
        location = LocationService._get(pk)
        clash = Location.objects.filter(
            state__iexact=data.get('state', location.state),
            district__iexact=data.get('district', location.district),
        ).exclude(pk=pk)
        if clash.exists():
            raise BusinessLogicException("Location already exists", code="location_exists")

        for field, value in data.items():
            setattr(location, field, value)
        if location.max_quantity < location.min_quantity:
            raise BusinessLogicException(
                "Maximum quantity must be greater than or equal to minimum quantity",
                code="invalid_quantity",
            )
        location.save()
        return location

    @staticmethod
    def delete(pk: int) -> None:
        location = LocationService._get(pk)
        location.delete()
        logger.info(f"Location {pk} deleted")

    @staticmethod
    @transaction.atomic
    def toggle_status(pk: int) -> Location:
        try:
            location = Location.objects.select_for_update().get(pk=pk)
        except Location.DoesNotExist:
            raise BusinessLogicException("No location with the id", code="location_not_found")
        location.is_active = not location.is_active
        location.save(update_fields=['is_active', 'updated_at'])
        return location

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def states(active_only: bool = False) -> list:
        qs = Location.objects.filter(is_active=True) if active_only else Location.objects.all()
        return list(qs.order_by('state').values_list('state', flat=True).distinct())

    @staticmethod
    def districts(state: str, active_only: bool = False) -> list:
        qs = Location.objects.filter(state__iexact=(state or "").strip())
        if active_only:
            qs = qs.filter(is_active=True)
        return list(qs.order_by('district').values('id', 'district', 'pin_code', 'min_quantity',
                                                   'max_quantity', 'price_per_unit'))

    @staticmethod
    def list_locations():
        return Location.objects.order_by('-created_at')

    @staticmethod
    def download_locations():
        return Location.objects.order_by('created_at')

    @staticmethod
    def find_active(state: str, district: str):
        return Location.objects.filter(
            state__iexact=state, district__iexact=district, is_active=True
        ).first()


class PincodeService:

    @staticmethod
    def pincodes(state: str, district: str) -> list:
        if not state or not district:
            raise BusinessLogicException("State and district are required", code="missing_params")
        return list(
            Pincode.objects.filter(state__iexact=state.strip(), district__iexact=district.strip())
            .order_by('pincode', 'office_name')
            .values('pincode', 'office_name', 'district', 'state')
        )

    @staticmethod
    @transaction.atomic
    def load(rows) -> int:
        """
        Upsert directory rows: iterable of dicts with pincode/office_name/district/state.
        """
        count = 0
        for row in rows:
            Pincode.objects.update_or_create(
                pincode=row['pincode'].strip(),
                office_name=row['office_name'].strip(),
                defaults={
                    'district': row['district'].strip(),
                    'state': row['state'].strip(),
                },
            )
            count += 1
        return count
