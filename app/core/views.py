"""
Core views providing infrastructure endpoints.

Views here are not part of the chat domain but are needed to run it,
such as the health check used by container orchestration.

The health check probes both backends the chat depends on: the database
(history, memberships) and the channel layer (realtime fan-out).
"""

from __future__ import annotations

import asyncio
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)

CHANNEL_LAYER_TIMEOUT = 2  # seconds


def _database_status() -> str:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.warning("Health check: database unreachable", exc_info=True)
        return "disconnected"
    return "connected"


async def _ping_channel_layer(layer) -> None:
    """Round-trip one message through a throwaway channel."""
    channel = await layer.new_channel()
    await layer.send(channel, {"type": "health.ping"})
    await asyncio.wait_for(layer.receive(channel), timeout=CHANNEL_LAYER_TIMEOUT)


def _channel_layer_status() -> str:
    layer = get_channel_layer()
    if layer is None:
        return "not configured"
    try:
        async_to_sync(_ping_channel_layer)(layer)
    except Exception:
        # Backend errors differ per layer (Redis, in-memory); any of them means down
        logger.warning("Health check: channel layer unreachable", exc_info=True)
        return "disconnected"
    return "connected"


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - channel_layer: "connected", "disconnected" or "not configured"

    HTTP Status Codes:
        200: All systems operational
        503: A backend is unreachable
    """
    health_status = {
        "database": _database_status(),
        "channel_layer": _channel_layer_status(),
    }
    is_healthy = all(value == "connected" for value in health_status.values())
    health_status["status"] = "healthy" if is_healthy else "unhealthy"

    return JsonResponse(health_status, status=200 if is_healthy else 503)
