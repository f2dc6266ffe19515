from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from apps.utils.throttle import OTPRateThrottle

from .services import AuthService
from .serializers import (
    RegisterSerializer, LoginSerializer, EmailSerializer, VerifyOTPSerializer,
    ResetPasswordSerializer, PhoneOTPRequestSerializer, PhoneOTPVerifySerializer,
    UserSerializer,
)


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = AuthService.register(**serializer.validated_data)
        return Response(
            {"message": "New user registered successfully", "user": UserSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(AuthService.login(**serializer.validated_data))


class SendOTPView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]
    admins_only = False

    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.send_email_otp(serializer.validated_data['email'], admins_only=self.admins_only)
        return Response({"message": "OTP sent successfully"})


class VerifyOTPView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]
    admins_only = False

    def post(self, request):
        serializer = VerifyOTPSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.verify_email_otp(
            serializer.validated_data['email'],
            serializer.validated_data['otp'],
            admins_only=self.admins_only,
        )
        return Response({"message": "OTP verified successfully"})


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]
    admins_only = False

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.reset_password(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
            admins_only=self.admins_only,
        )
        return Response({"message": "Password reset successfully"})


class SendPhoneOTPView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]

    def post(self, request):
        serializer = PhoneOTPRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.request_phone_otp(serializer.validated_data['phone'])
        return Response({"message": "OTP sent successfully"})


class VerifyPhoneOTPView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPRateThrottle]

    def post(self, request):
        serializer = PhoneOTPVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.verify_phone_otp(
            serializer.validated_data['phone'],
            serializer.validated_data['otp'],
        )
        return Response({"message": "Phone number verified successfully"})


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)
