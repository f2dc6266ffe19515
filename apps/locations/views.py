import csv
import io

from django.http import HttpResponse

from rest_framework import filters, generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsNurseryAdmin
from apps.utils.filters import AdminFilterBackend
from apps.utils.pagination import AdminListMixin
from .filters import LocationFilter
from .serializers import LocationSerializer
from .services import LocationService, PincodeService


class LocationCreateView(APIView):
    permission_classes = [IsNurseryAdmin]

    def post(self, request):
        serializer = LocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        location = LocationService.create(serializer.validated_data)
        return Response(
            {"message": "New location added successfully!", "location": LocationSerializer(location).data},
            status=status.HTTP_201_CREATED,
        )


class LocationDetailView(APIView):
    permission_classes = [IsNurseryAdmin]

    def put(self, request, pk):
        serializer = LocationSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        location = LocationService.edit(pk, serializer.validated_data)
        return Response({"message": "Location updated successfully", "location": LocationSerializer(location).data})

    def delete(self, request, pk):
        LocationService.delete(pk)
        return Response({"message": "Location deleted successfully"})


class LocationToggleView(APIView):
    permission_classes = [IsNurseryAdmin]

    def put(self, request, pk):
        location = LocationService.toggle_status(pk)
        state = "activated" if location.is_active else "deactivated"
        return Response({
            "message": f"Location {state} successfully",
            "location": LocationSerializer(location).data,
        })


class LocationListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = LocationSerializer
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = LocationFilter
    search_fields = ['state', 'district']
    list_message = "Showing all the locations"
    envelope_key = results_key = "locations"

    def get_queryset(self):
        return LocationService.list_locations()


class LocationDownloadView(APIView):
    """
    JSON by default, CSV with ?format_type=csv.
    """
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        qs = LocationService.download_locations()
        if request.query_params.get('format_type') != 'csv':
            return Response({
                "message": "Downloading all locations data",
                "locations": LocationSerializer(qs, many=True).data,
            })

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(['State', 'District', 'Pin Code', 'Min Quantity', 'Max Quantity', 'Price Per Unit', 'Active'])
        for loc in qs:
            writer.writerow([loc.state, loc.district, loc.pin_code, loc.min_quantity,
                             loc.max_quantity, loc.price_per_unit, loc.is_active])
        response = HttpResponse(buffer.getvalue(), content_type="text/csv")
        response['Content-Disposition'] = 'attachment; filename="locations.csv"'
        return response


class StateListView(APIView):
    permission_classes = [IsNurseryAdmin]
    active_only = False

    def get(self, request):
        return Response({
            "message": "Showing all unique states",
            "states": LocationService.states(active_only=self.active_only),
        })


class DistrictListView(APIView):
    permission_classes = [IsNurseryAdmin]
    active_only = False

    def get(self, request, state):
        return Response({
            "message": "Showing all the locations data",
            "data": LocationService.districts(state, active_only=self.active_only),
        })


class PublicStateListView(StateListView):
    permission_classes = [AllowAny]
    active_only = True


class PublicDistrictListView(DistrictListView):
    permission_classes = [AllowAny]
    active_only = True


class PincodeListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        result = PincodeService.pincodes(
            request.query_params.get('state'),
            request.query_params.get('district'),
        )
        return Response({"message": "Showing all the pincodes", "result": result})
