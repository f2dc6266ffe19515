from django.conf import settings
from django.core.paginator import EmptyPage
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class AdminPageNumberPagination(PageNumberPagination):
    """
    Admin tables take the page number from the URL and show a fixed page size.

    Pages past the end return an empty list rather than a 404. The view names
    the envelope through ``list_message``, ``envelope_key`` and ``results_key``.
    """

    def get_page_size(self, request):
        return settings.ADMIN_PAGE_SIZE

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.view = view
        self.page_number = max(int(view.kwargs.get('page') or 1), 1)
        paginator = self.django_paginator_class(queryset, self.get_page_size(request))
        self.paginator = paginator
        try:
            self.page = paginator.page(self.page_number)
        except EmptyPage:
            self.page = None
            return []
        return list(self.page)

    def get_paginated_response(self, data):
        view = self.view
        return Response({
            "message": view.list_message,
            view.envelope_key: {
                view.results_key: data,
                "total_count": self.paginator.count,
                "current_page": self.page_number,
                "total_pages": self.paginator.num_pages,
                "per_page": self.paginator.per_page,
            },
        })


class AdminListMixin:
    """
    GET handler for the paginated admin tables: filter, slice one page, wrap.
    """
    pagination_class = AdminPageNumberPagination
    list_message = None
    envelope_key = None
    results_key = None

    def get(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)
