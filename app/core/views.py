"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks.
"""

import logging

from channels.exceptions import InvalidChannelLayerError
from channels.layers import get_channel_layer
from django.conf import settings
from django.http import JsonResponse
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    This endpoint is used by:
    - Docker health checks
    - Kubernetes liveness/readiness probes
    - Load balancers

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - channel_layer: "configured" or "missing"
        - plus any counters published by installed apps

    HTTP Status Codes:
        200: All systems operational
        503: One or more systems unhealthy

    Example Response:
        {
            "status": "healthy",
            "channel_layer": "configured",
            "users": 10,
            "messages": 2
        }
    """
    health_status = {
        "status": "healthy",
        "channel_layer": "missing",
    }
    is_healthy = True

    # Realtime fan-out is useless without a channel layer
    try:
        if get_channel_layer() is not None:
            health_status["channel_layer"] = "configured"
        else:
            health_status["status"] = "unhealthy"
            is_healthy = False
    except InvalidChannelLayerError:
        logger.exception("Channel layer is misconfigured")
        health_status["status"] = "unhealthy"
        is_healthy = False

    for dotted_path in getattr(settings, "HEALTH_CHECK_PROBES", []):
        health_status.update(import_string(dotted_path)())

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
