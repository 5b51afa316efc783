import time

import structlog
from django.db import DatabaseError, connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    """Report whether the order store is reachable."""
    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        database = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
        healthy = True
    except DatabaseError:
        database = {"status": "down"}
        healthy = False
        logger.error("health_check_db_failure", exc_info=True)

    logger.info("health_check_completed", status="healthy" if healthy else "unhealthy")

    return JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": {"database": database},
        },
        status=200 if healthy else 503,
    )
