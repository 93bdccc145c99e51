import time

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from rest_framework.exceptions import NotFound
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


class HealthCheckView(APIView):
    """
    Public health endpoint used by the hosting platform and the web client.
    - "ok" needs a working DB; anything else reports "degraded"
    - Reports whether Supabase token auth is configured, since without the
      JWT secret every API call from the web client fails with 401
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        started = time.monotonic()

        try:
            with connections["default"].cursor() as cursor:
                cursor.execute("SELECT 1")
            db_ok = True
        except DatabaseError:
            db_ok = False

        latency_ms = int((time.monotonic() - started) * 1000)

        return Response(
            {
                "service": "sciencehub",
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "supabase_auth": bool(getattr(settings, "SUPABASE_JWT_SECRET", None)),
                "auto_open_chat": settings.SCIENCEHUB["AUTO_OPEN_CHAT_ON_ACCEPT"],
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": latency_ms,
            }
        )


class EndpointNotFoundView(APIView):
    """
    Catch-all for /api/ paths no route matched (unknown resources,
    non-numeric ids). Raising inside DRF keeps the {"error": ...} body.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        raise NotFound("Endpoint not found")


def json_not_found(request, exception=None):
    return JsonResponse({"error": "Not found"}, status=404)


def json_server_error(request):
    return JsonResponse({"error": "Internal server error."}, status=500)
