from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    RegisterView, LoginView, SendOTPView, VerifyOTPView, ResetPasswordView,
    SendPhoneOTPView, VerifyPhoneOTPView, MeView,
)
from .views_social import GoogleLoginView
from .views_admin import (
    AdminLoginView, AdminSendOTPView, AdminVerifyOTPView, AdminResetPasswordView,
    AdminProfileView, UserListView, UserExportView, UserDeleteView,
)

urlpatterns = [
    path('register/', RegisterView.as_view(), name='user-register'),
    path('login/', LoginView.as_view(), name='user-login'),
    path('send-otp/', SendOTPView.as_view(), name='user-send-otp'),
    path('verify-otp/', VerifyOTPView.as_view(), name='user-verify-otp'),
    path('reset-password/', ResetPasswordView.as_view(), name='user-reset-password'),
    path('phone/send-otp/', SendPhoneOTPView.as_view(), name='phone-send-otp'),
    path('phone/verify-otp/', VerifyPhoneOTPView.as_view(), name='phone-verify-otp'),
    path('google/', GoogleLoginView.as_view(), name='google-login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('me/', MeView.as_view(), name='user-me'),

    path('admin/login/', AdminLoginView.as_view(), name='admin-login'),
    path('admin/send-otp/', AdminSendOTPView.as_view(), name='admin-send-otp'),
    path('admin/verify-otp/', AdminVerifyOTPView.as_view(), name='admin-verify-otp'),
    path('admin/reset-password/', AdminResetPasswordView.as_view(), name='admin-reset-password'),
    path('admin/profile/', AdminProfileView.as_view(), name='admin-profile'),
    path('admin/users/page/<int:page>/', UserListView.as_view(), name='admin-user-list'),
    path('admin/users/export/', UserExportView.as_view(), name='admin-user-export'),
    path('admin/users/<int:pk>/', UserDeleteView.as_view(), name='admin-user-delete'),
]
