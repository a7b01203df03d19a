import logging
import time

from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsAdminRole
from .models import AuditLog
from .serializers import AuditLogSerializer

logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()


class HealthView(APIView):
    """
    Database connectivity probe. No authentication.
    200 when ``SELECT 1`` succeeds, 500 otherwise; same body shape both ways.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = []

    def get(self, request):
        payload = {
            "status": "ok",
            "database": "connected",
            "timestamp": timezone.now().isoformat(),
            "uptime": int(time.monotonic() - _STARTED_AT),
        }
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except DatabaseError:
            logger.exception("Health check failed")
            payload.update(status="error", database="disconnected")
            return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(payload)


class AuditLogListView(generics.ListAPIView):
    # Select related avoids N+1 queries when fetching users
    queryset = AuditLog.objects.select_related('actor').all()
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = super().get_queryset()
        action = self.request.query_params.get('action')
        if action:
            queryset = queryset.filter(action=action)
        return queryset
