from django_filters import rest_framework as filters
from django_filters.fields import ChoiceField

from .exceptions import BusinessLogicException

DATE_INPUT_FORMATS = ["%Y-%m-%d"]


class AdminFilterBackend(filters.DjangoFilterBackend):
    """
    Invalid query params surface as the usual ``{"error", "code"}`` body carrying
    the first filter's own message.
    """

    def filter_queryset(self, request, queryset, view):
        filterset = self.get_filterset(request, queryset, view)
        if filterset is None:
            return queryset

        if not filterset.is_valid():
            field, errors = next(iter(filterset.errors.items()))
            code = "invalid_date" if field.endswith("_date") else f"invalid_{field}"
            raise BusinessLogicException(errors[0], code=code)
        return filterset.qs


class DayFilter(filters.DateFilter):
    """YYYY-MM-DD bound; pair with a ``date__gte``/``date__lte`` lookup on datetimes."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('input_formats', DATE_INPUT_FORMATS)
        kwargs.setdefault('error_messages', {"invalid": "Invalid date format provided"})
        super().__init__(*args, **kwargs)


class UpperCaseChoiceField(ChoiceField):
    def to_python(self, value):
        value = super().to_python(value)
        return value.upper() if value else value


class UpperCaseChoiceFilter(filters.ChoiceFilter):
    field_class = UpperCaseChoiceField


class CreatedDateFilter(filters.FilterSet):
    """from_date/to_date on ``created_at``; not bound to a model so any table can use it."""
    from_date = DayFilter(field_name='created_at', lookup_expr='date__gte')
    to_date = DayFilter(field_name='created_at', lookup_expr='date__lte')
