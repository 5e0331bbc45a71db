"""Gunicorn configuration for the order list portal."""

from __future__ import annotations

import os


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


wsgi_app = os.getenv("WEB_PORTAL_WSGI_APP") or "orderlist.web_portal.app:create_app()"
workers = _get_int("WEB_PORTAL_WORKERS", 1)
worker_class = "gthread"
threads = _get_int("WEB_PORTAL_THREADS", 8)
timeout = _get_int("WEB_PORTAL_TIMEOUT", 60)
accesslog = os.getenv("WEB_PORTAL_ACCESS_LOG") or "-"
errorlog = os.getenv("WEB_PORTAL_ERROR_LOG") or "-"
bind = os.getenv("WEB_PORTAL_BIND") or (
    f"{os.getenv('WEB_PORTAL_HOST') or '0.0.0.0'}:{os.getenv('WEB_PORTAL_PORT') or '8000'}"
)
