"""Liveness route."""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, jsonify  # pylint: disable=import-error

bp = Blueprint("health", __name__)


@bp.get("/healthz")
def healthz():
    return jsonify({"status": "ok", "now": datetime.now(timezone.utc).isoformat()})
