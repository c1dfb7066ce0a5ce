"""Core views for the QurtubloX Store."""

import logging

from django.db import connection
from django.http import JsonResponse

from .conf import get_setting

logger = logging.getLogger(__name__)


def health_check(request):
    """Health check endpoint for container orchestration."""
    try:
        # Check database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return JsonResponse({
            "status": "healthy",
            "database": "connected",
            "store": get_setting("STORE_NAME"),
        })
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        return JsonResponse(
            {"status": "unhealthy", "error": str(e)},
            status=503,
        )
