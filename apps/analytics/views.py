# apps/analytics/views.py
from rest_framework import views
from rest_framework.response import Response

from apps.accounts.permissions import IsNurseryAdmin
from .services import DashboardService


def dashboard_response(message, data):
    return Response({"success": True, "status": 200, "message": message, "data": data})


class DashboardBaseView(views.APIView):
    permission_classes = [IsNurseryAdmin]

    def range_params(self):
        params = self.request.query_params
        return {
            "period": params.get("period"),
            "start_date": params.get("start_date"),
            "end_date": params.get("end_date"),
        }


class DashboardOverviewView(DashboardBaseView):
    def get(self, request):
        return dashboard_response("Dashboard overview fetched successfully", DashboardService.overview())


class VisitorsChartView(DashboardBaseView):
    def get(self, request):
        data = DashboardService.visitors_chart(**self.range_params())
        return dashboard_response("Visitors chart data fetched successfully", data)


class RevenueGraphView(DashboardBaseView):
    def get(self, request):
        data = DashboardService.revenue_graph(**self.range_params())
        return dashboard_response("Revenue graph data fetched successfully", data)


class FullDashboardView(DashboardBaseView):
    def get(self, request):
        data = DashboardService.full_dashboard(**self.range_params())
        return dashboard_response("Dashboard data fetched successfully", data)
