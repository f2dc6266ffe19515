from rest_framework import views, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.accounts.permissions import IsNurseryAdmin
from .serializers import (
    MonthlyInventorySerializer,
    InventoryInputSerializer,
    InventoryToggleSerializer,
    InventoryStatusLogSerializer,
)
from .services import InventoryService


class InventoryListCreateView(views.APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        qs = InventoryService.list_all()
        return Response({
            "message": "Showing all the inventory",
            "inventory": MonthlyInventorySerializer(qs, many=True).data,
        })

    def post(self, request):
        serializer = InventoryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inventory = InventoryService.create(**serializer.validated_data)
        return Response(
            {"message": "Inventory created successfully", "inventory": MonthlyInventorySerializer(inventory).data},
            status=status.HTTP_201_CREATED,
        )


class InventoryMonthView(views.APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request, month):
        inventory = InventoryService.get_by_month(month)
        return Response({
            "message": f"Showing the inventory for {month}",
            "inventory": MonthlyInventorySerializer(inventory).data,
        })

    def put(self, request, month):
        serializer = InventoryInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        inventory = InventoryService.update(month, serializer.validated_data)
        return Response({
            "message": "Inventory updated successfully",
            "inventory": MonthlyInventorySerializer(inventory).data,
        })


class InventoryDeleteView(views.APIView):
    permission_classes = [IsNurseryAdmin]

    def delete(self, request, pk):
        InventoryService.delete(pk)
        return Response({"message": "Inventory deleted successfully"})


class InventoryToggleView(views.APIView):
    permission_classes = [IsNurseryAdmin]

    def put(self, request, pk):
        serializer = InventoryToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inventory = InventoryService.toggle_status(pk, serializer.validated_data['reason'], user=request.user)
        return Response({
            "message": "Inventory status updated successfully",
            "inventory": MonthlyInventorySerializer(inventory).data,
            "history": InventoryStatusLogSerializer(inventory.status_logs.all()[:10], many=True).data,
        })


class AvailableMonthsView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        qs = InventoryService.available_months()
        return Response({
            "message": "Showing all the available months",
            "months": MonthlyInventorySerializer(qs, many=True).data,
        })
