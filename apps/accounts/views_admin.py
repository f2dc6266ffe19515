from rest_framework import filters, generics
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from apps.utils.filters import AdminFilterBackend, CreatedDateFilter
from apps.utils.pagination import AdminListMixin
from apps.utils.throttle import OTPRateThrottle
from .permissions import IsNurseryAdmin
from .services import AuthService, UserDirectoryService
from .serializers import LoginSerializer, AdminProfileSerializer, UserSerializer, UserExportSerializer
from .views import SendOTPView, VerifyOTPView, ResetPasswordView


class AdminLoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(AuthService.admin_login(**serializer.validated_data))


class AdminSendOTPView(SendOTPView):
    admins_only = True


class AdminVerifyOTPView(VerifyOTPView):
    admins_only = True


class AdminResetPasswordView(ResetPasswordView):
    admins_only = True


class AdminProfileView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def put(self, request):
        serializer = AdminProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        admin = AuthService.edit_admin_profile(request.user, **serializer.validated_data)
        return Response({"message": "Profile updated successfully", "admin": UserSerializer(admin).data})


class UserListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = UserSerializer
    filter_backends = [AdminFilterBackend, filters.SearchFilter]
    filterset_class = CreatedDateFilter
    search_fields = ['name', 'email']
    list_message = "Showing all the users"
    envelope_key = results_key = "users"

    def get_queryset(self):
        return UserDirectoryService.customers()


class UserExportView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request):
        qs = UserDirectoryService.customers()
        return Response({"users": UserExportSerializer(qs, many=True).data})


class UserDeleteView(APIView):
    permission_classes = [IsNurseryAdmin]

    def delete(self, request, pk):
        UserDirectoryService.delete_user(pk)
        return Response({"message": "User deleted successfully"})
