from django.urls import path

from .views import ContactFormView, CallBackRequestView, CallBackListView, CallBackDeleteView

urlpatterns = [
    path('contact/', ContactFormView.as_view(), name='support-contact'),
    path('callback/', CallBackRequestView.as_view(), name='support-callback'),
    path('admin/callbacks/page/<int:page>/', CallBackListView.as_view(), name='admin-callback-list'),
    path('admin/callbacks/<int:pk>/', CallBackDeleteView.as_view(), name='admin-callback-delete'),
]
