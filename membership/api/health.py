"""Health check endpoints for container probes."""

import logging

from django.conf import settings
from django.db import DatabaseError, connection
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from membership.services.year_service import YearService

logger = logging.getLogger(__name__)


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    Liveness probe.

    Returns:
        200 OK: Service is healthy
        503 Service Unavailable: Database unreachable
    """
    health_status = {"status": "healthy", "checks": {}}

    try:
        connection.ensure_connection()
        health_status["checks"]["database"] = "ok"
    except DatabaseError as e:
        logger.error(f"Database health check failed: {str(e)}")
        health_status["checks"]["database"] = "error"
        health_status["status"] = "unhealthy"

    health_status["checks"]["rabbitmq"] = "enabled" if settings.RABBITMQ_ENABLED else "disabled"

    if health_status["status"] == "healthy":
        return Response(health_status, status=status.HTTP_200_OK)
    return Response(health_status, status=status.HTTP_503_SERVICE_UNAVAILABLE)


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness probe. Also reports years whose payment reset is still pending.
    """
    try:
        pending = YearService().pending_rollovers()
    except DatabaseError as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return Response({"status": "not ready"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response({"status": "ready", "pendingRollovers": pending}, status=status.HTTP_200_OK)
