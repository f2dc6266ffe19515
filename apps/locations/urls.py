from django.urls import path

from .views import (
    LocationCreateView, LocationDetailView, LocationToggleView, LocationListView, LocationDownloadView,
    StateListView, DistrictListView, PublicStateListView, PublicDistrictListView, PincodeListView,
)

urlpatterns = [
    # Public
    path('states/', PublicStateListView.as_view(), name='location-states'),
    path('states/<str:state>/districts/', PublicDistrictListView.as_view(), name='location-districts'),
    path('pincodes/', PincodeListView.as_view(), name='location-pincodes'),

    # Admin
    path('admin/', LocationCreateView.as_view(), name='admin-location-create'),
    path('admin/page/<int:page>/', LocationListView.as_view(), name='admin-location-list'),
    path('admin/download/', LocationDownloadView.as_view(), name='admin-location-download'),
    path('admin/states/', StateListView.as_view(), name='admin-location-states'),
    path('admin/states/<str:state>/districts/', DistrictListView.as_view(), name='admin-location-districts'),
    path('admin/<int:pk>/', LocationDetailView.as_view(), name='admin-location-detail'),
    path('admin/<int:pk>/toggle/', LocationToggleView.as_view(), name='admin-location-toggle'),
]
