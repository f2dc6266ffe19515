from django.db import models
from django.utils import timezone

from apps.utils.models import TimestampedModel
from .choices import StageType, StageStatus

__all__ = ["ProgressTracker", "STAGE_FIELDS", "STAGE_PROGRESS"]

# StageType -> field prefix on ProgressTracker
STAGE_FIELDS = {
    StageType.ORDER_CONFIRMED: "order_confirmed",
    StageType.NURSERY_ALLOCATION: "nursery_allocation",
    StageType.GROWTH_PHASE: "growth_phase",
    StageType.READY_FOR_DISPATCH: "ready_for_dispatch",
    StageType.DELIVERED: "delivered",
}

# Progress shown once a stage becomes the current one
STAGE_PROGRESS = {
    StageType.ORDER_CONFIRMED: 0,
    StageType.NURSERY_ALLOCATION: 20,
    StageType.GROWTH_PHASE: 40,
    StageType.READY_FOR_DISPATCH: 70,
    StageType.DELIVERED: 100,
}


def _stage_status_field():
    return models.CharField(max_length=20, choices=StageStatus.choices, default=StageStatus.PENDING)


class ProgressTracker(TimestampedModel):
    """
    Fulfilment progress of a single order, one status + start/end pair per stage.
    """
    order = models.OneToOneField('orders.Order', on_delete=models.CASCADE, related_name='progress_tracker')

    order_confirmed_status = _stage_status_field()
    order_confirmed_start = models.DateTimeField(null=True, blank=True)
    order_confirmed_end = models.DateTimeField(null=True, blank=True)

    nursery_allocation_status = _stage_status_field()
    nursery_allocation_start = models.DateTimeField(null=True, blank=True)
    nursery_allocation_end = models.DateTimeField(null=True, blank=True)

    growth_phase_status = _stage_status_field()
    growth_phase_start = models.DateTimeField(null=True, blank=True)
    growth_phase_end = models.DateTimeField(null=True, blank=True)

    ready_for_dispatch_status = _stage_status_field()
    ready_for_dispatch_start = models.DateTimeField(null=True, blank=True)
    ready_for_dispatch_end = models.DateTimeField(null=True, blank=True)

    delivered_status = _stage_status_field()
    delivered_start = models.DateTimeField(null=True, blank=True)
    delivered_end = models.DateTimeField(null=True, blank=True)

    current_stage = models.CharField(
        max_length=30, choices=StageType.choices, null=True, blank=True, db_index=True
    )
    progress_percentage = models.PositiveSmallIntegerField(default=0)

    def __str__(self):
        return f"{self.order_id}: {self.current_stage or 'NOT STARTED'} ({self.progress_percentage}%)"

    def stage_status(self, stage):
        return getattr(self, f"{STAGE_FIELDS[stage]}_status")

    def start_stage(self, stage, at=None):
        prefix = STAGE_FIELDS[stage]
        setattr(self, f"{prefix}_status", StageStatus.IN_PROGRESS)
        setattr(self, f"{prefix}_start", at or timezone.now())

    def complete_stage(self, stage, started_at=None, at=None):
        prefix = STAGE_FIELDS[stage]
        at = at or timezone.now()
        setattr(self, f"{prefix}_status", StageStatus.COMPLETED)
        if started_at is not None or getattr(self, f"{prefix}_start") is None:
            setattr(self, f"{prefix}_start", started_at or at)
        setattr(self, f"{prefix}_end", at)

    def move_to(self, stage):
        self.current_stage = stage
        self.progress_percentage = STAGE_PROGRESS[stage]

    def as_stages(self):
        """Ordered per-stage view used by the storefront timeline."""
        return [
            {
                "stage": stage.value,
                "label": stage.label,
                "status": getattr(self, f"{prefix}_status"),
                "start": getattr(self, f"{prefix}_start"),
                "end": getattr(self, f"{prefix}_end"),
            }
            for stage, prefix in STAGE_FIELDS.items()
        ]
