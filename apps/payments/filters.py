from django_filters import rest_framework as filters

from apps.orders.models import Order, OrderStatus, OrderRefundStatus
from apps.utils.filters import DayFilter, UpperCaseChoiceFilter


class RefundRequestFilter(filters.FilterSet):
    status = filters.ChoiceFilter(
        field_name='refund_status',
        choices=OrderRefundStatus.choices,
        error_messages={"invalid_choice": "Enter a valid status value"},
    )
    from_date = DayFilter(field_name='refund_request_date', lookup_expr='date__gte')
    to_date = DayFilter(field_name='refund_request_date', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = ['status', 'from_date', 'to_date']


class TransactionFilter(filters.FilterSet):
    # ?status=paid and ?status=PAID both work
    status = UpperCaseChoiceFilter(
        field_name='status',
        choices=OrderStatus.choices,
        error_messages={"invalid_choice": "Please enter a valid status option"},
    )
    from_date = DayFilter(field_name='created_at', lookup_expr='date__gte')
    to_date = DayFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = ['status', 'from_date', 'to_date']
