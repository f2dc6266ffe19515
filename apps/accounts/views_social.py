from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from .services import AuthService
from .serializers import GoogleLoginSerializer


class GoogleLoginView(APIView):
    """
    Storefront "Continue with Google".

    The frontend obtains a Google ID token and posts it here; the response
    has the same shape as the password login.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = GoogleLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(AuthService.google_login(serializer.validated_data['token']))
