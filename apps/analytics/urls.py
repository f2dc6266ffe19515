# apps/analytics/urls.py
from django.urls import path

from .views import DashboardOverviewView, VisitorsChartView, RevenueGraphView, FullDashboardView

urlpatterns = [
    path("dashboard/", FullDashboardView.as_view(), name="analytics-dashboard"),
    path("dashboard/overview/", DashboardOverviewView.as_view(), name="analytics-overview"),
    path("dashboard/visitors/", VisitorsChartView.as_view(), name="analytics-visitors"),
    path("dashboard/revenue/", RevenueGraphView.as_view(), name="analytics-revenue"),
]
