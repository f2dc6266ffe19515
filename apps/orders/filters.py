from django_filters import rest_framework as filters

from apps.utils.filters import DayFilter
from .models import Order, StageType


class AdminOrderFilter(filters.FilterSet):
    status = filters.ChoiceFilter(
        field_name='progress_tracker__current_stage',
        choices=StageType.choices,
        error_messages={"invalid_choice": "Invalid status value"},
    )
    from_date = DayFilter(field_name='delivery_date', lookup_expr='gte')
    to_date = DayFilter(field_name='delivery_date', lookup_expr='lte')
    state = filters.CharFilter(field_name='state', lookup_expr='icontains')

    class Meta:
        model = Order
        fields = ['status', 'from_date', 'to_date', 'state']


class OrderExportFilter(filters.FilterSet):
    state = filters.CharFilter(field_name='state', lookup_expr='icontains')

    class Meta:
        model = Order
        fields = ['state']
