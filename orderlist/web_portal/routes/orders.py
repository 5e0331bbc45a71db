"""Order list routes."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, current_app, jsonify, request, session  # pylint: disable=import-error

from ..config import FACILITY_PARAM, SESSION_KEY, default_facility
from ..order_service import apply_request, load_order_page
from ..state_store import FilterStateStore

bp = Blueprint("orders", __name__)
logger = logging.getLogger(__name__)

STORE_EXTENSION = "order_list_store"


def _state_store() -> FilterStateStore:
    return current_app.extensions[STORE_EXTENSION]


def _session_id() -> str:
    session_id = session.get(SESSION_KEY)
    if not session_id:
        session_id = FilterStateStore.new_session_id()
        session[SESSION_KEY] = session_id
    return session_id


def _request_facility() -> str | None:
    raw = request.args.get(FACILITY_PARAM)
    if raw is not None and raw.strip():
        return raw.strip()
    return default_facility()


@bp.get("/orders")
def list_orders():
    """Apply any state change in the query string and return the page."""
    params: dict[str, Any] = request.args.to_dict()
    facility = _request_facility()
    with _state_store().locked(_session_id()) as state:
        outcome = apply_request(state, params)
        page = load_order_page(state, facility)
        snapshot = state.to_dict()
    if not page.ok:
        return jsonify({"error": page.error, "state": snapshot}), 503
    payload = page.as_payload()
    payload["state"] = snapshot
    payload["update"] = outcome.value
    return jsonify(payload)


@bp.get("/orders/state")
def order_list_state():
    """Return the session's list state without querying the store."""
    with _state_store().locked(_session_id()) as state:
        snapshot = state.to_dict()
        snapshot["has_previous"] = state.has_previous()
        snapshot["has_next"] = state.has_next()
        snapshot["has_all_status"] = state.has_all_status()
    return jsonify(snapshot)


@bp.post("/orders/state/reset")
def reset_order_list_state():
    """Drop the session's list state so the next request starts from defaults."""
    session_id = session.pop(SESSION_KEY, None)
    if session_id:
        _state_store().discard(session_id)
    return jsonify({"reset": bool(session_id)})
