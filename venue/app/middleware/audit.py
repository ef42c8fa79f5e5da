# venue/app/middleware/audit.py
"""
Request log: one JSON line per request on the "venue.audit" logger.

    group     calendar | bookings | admin | health | other
    admin_id  acting admin (X-Admin-Id), admin routes only
    level     INFO; WARNING for rejected writes (4xx on POST/DELETE); ERROR for 5xx

Does not block the request and does not write to the database; the
booking_actions audit trail is written by AdminService.
"""

import json
import logging
import time

from fastapi import Request

logger = logging.getLogger("venue.audit")

ROUTE_GROUPS = {"calendar", "bookings", "admin", "health"}
WRITE_METHODS = {"POST", "DELETE"}


def client_ip(request: Request) -> str:
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


def route_group(path: str) -> str:
    head = path.strip("/").split("/", 1)[0]
    return head if head in ROUTE_GROUPS else "other"


def _level(method: str, status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 and method in WRITE_METHODS:
        return logging.WARNING
    return logging.INFO


async def audit_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - started) * 1000)

    group = route_group(request.url.path)
    record = {
        "group": group,
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "ip": client_ip(request),
        "duration_ms": duration_ms,
    }
    if group == "admin":
        record["admin_id"] = request.headers.get("X-Admin-Id")

    logger.log(_level(request.method, response.status_code), json.dumps(record, ensure_ascii=False))
    return response
