import logging

from django.conf import settings
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from .authentication import clear_auth_cookies, set_auth_cookies
from .serializers import LoginSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


class UnauthorizedMixin:
    """
    Views without authenticators still answer credential failures with 401.
    DRF downgrades them to 403 when no WWW-Authenticate value is available.
    """

    def get_authenticate_header(self, request):
        return 'Bearer realm="api"'


class RegisterView(generics.CreateAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []


class LoginView(UnauthorizedMixin, APIView):
    """
    Checks email + password and hands the token pair back as HttpOnly
    cookies. The body only says whether it worked.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        data = serializer.validated_data
        logger.info(f"User {data['user']['id']} logged in")
        response = Response({"success": True, "user": data['user']})
        return set_auth_cookies(response, data['access'], data['refresh'])


class RefreshView(UnauthorizedMixin, APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        raw_refresh = request.COOKIES.get(settings.AUTH_COOKIE_REFRESH)
        if not raw_refresh:
            raise NotAuthenticated("Missing refresh token")

        serializer = TokenRefreshSerializer(data={'refresh': raw_refresh})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        data = serializer.validated_data
        response = Response({"success": True})
        return set_auth_cookies(response, data['access'], data.get('refresh'))


class LogoutView(UnauthorizedMixin, APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        raw_refresh = request.COOKIES.get(settings.AUTH_COOKIE_REFRESH)
        if raw_refresh:
            try:
                RefreshToken(raw_refresh).blacklist()
            except TokenError:
                # Already expired or revoked; clearing the cookies is enough
                logger.debug("Logout with an unusable refresh token")

        response = Response({"success": True})
        return clear_auth_cookies(response)


class LogoutAllView(APIView):
    """Revokes every refresh token issued to the caller."""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        revoked = 0
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            revoked += int(created)

        logger.info(f"User {request.user.id} revoked {revoked} refresh tokens")
        response = Response({"success": True, "revoked": revoked}, status=status.HTTP_200_OK)
        return clear_auth_cookies(response)


class UserProfileView(generics.RetrieveAPIView):
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user
