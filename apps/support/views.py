from rest_framework import filters, generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsNurseryAdmin
from apps.utils.filters import AdminFilterBackend, CreatedDateFilter
from apps.utils.pagination import AdminListMixin
from apps.utils.throttle import BurstRateThrottle
from .serializers import ContactFormSerializer, CallBackSerializer
from .services import SupportService, KIND_CALLBACK


class ContactFormView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [BurstRateThrottle]

    def post(self, request):
        serializer = ContactFormSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = SupportService.submit_contact(**{
            k: serializer.validated_data[k] for k in ('name', 'email', 'message', 'phone')
        })
        return Response(
            {"message": "Contact details submitted successfully", "contact": ContactFormSerializer(contact).data},
            status=status.HTTP_201_CREATED,
        )


class CallBackRequestView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        callback = SupportService.request_callback(request.user)
        return Response(
            {"message": "New callback saved successfully!", "call_back": CallBackSerializer(callback).data},
            status=status.HTTP_201_CREATED,
        )


class CallBackListView(AdminListMixin, generics.GenericAPIView):
    """
    ?kind=callback lists callback requests, anything else lists contact forms.
    """
    permission_classes = [IsNurseryAdmin]
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = CreatedDateFilter
    list_message = "Showing all the callbacks"
    envelope_key = results_key = "callbacks"

    @property
    def kind(self):
        return self.request.query_params.get('kind')

    @property
    def search_fields(self):
        if self.kind == KIND_CALLBACK:
            return ['name', 'email', 'phone']
        return ['name', 'email', 'phone', 'message']

    def get_serializer_class(self):
        return CallBackSerializer if self.kind == KIND_CALLBACK else ContactFormSerializer

    def get_queryset(self):
        return SupportService.list_callbacks(kind=self.kind)


class CallBackDeleteView(APIView):
    permission_classes = [IsNurseryAdmin]

    def delete(self, request, pk):
        SupportService.delete_callback(pk, kind=request.query_params.get('kind'))
        return Response({"message": "Callback deleted successfully"})
