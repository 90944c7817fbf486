from __future__ import annotations

import logging

from django.db import DatabaseError, connection
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from elections.models import Election

logger = logging.getLogger(__name__)


@require_GET
def healthz(_request: HttpRequest) -> JsonResponse:
    return JsonResponse({"status": "ok"})


@require_GET
def readyz(_request: HttpRequest) -> JsonResponse:
    """Ready once the record store answers a query against the election tables."""
    try:
        connection.ensure_connection()
        Election.objects.order_by().values_list("pk", flat=True).first()
    except DatabaseError as exc:
        logger.exception("Readiness probe failed: record store unreachable")
        return JsonResponse({"status": "not ready", "error": str(exc)}, status=503)

    return JsonResponse({"status": "ready", "database": connection.vendor})
