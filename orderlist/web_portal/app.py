"""Flask app wiring for the order list portal."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv  # pylint: disable=import-error
from flask import Flask  # pylint: disable=import-error
from werkzeug.middleware.proxy_fix import ProxyFix  # pylint: disable=import-error

from ..core.env_utils import parse_bool
from ..core.logging_utils import configure_logging as configure_service_logging
from .db_pool import close_db_pool
from .routes import STORE_EXTENSION, register_blueprints
from .state_store import FilterStateStore

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_FILE = os.getenv("ENV_FILE") or os.path.abspath(os.path.join(BASE_DIR, "..", ".env"))

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def configure_logging() -> None:
    """Configure portal logging from environment settings."""
    configure_service_logging(
        service_name="order-list",
        logger=logger,
        basic_config=logging.basicConfig,
        level_raw=os.getenv("LOG_LEVEL", "INFO"),
    )


def _require_secret_key() -> str:
    secret = os.getenv("WEB_PORTAL_SECRET_KEY")
    if not secret:
        logger.warning("WEB_PORTAL_SECRET_KEY is required for order list sessions.")
        raise RuntimeError("WEB_PORTAL_SECRET_KEY is not set.")
    return secret


def _apply_session_cookie_settings(app: Flask) -> None:
    raw = os.getenv("WEB_PORTAL_COOKIE_SECURE")
    if raw is not None:
        app.config["SESSION_COOKIE_SECURE"] = parse_bool(raw)

    raw = os.getenv("WEB_PORTAL_COOKIE_SAMESITE")
    if raw is not None:
        normalized = raw.strip().lower()
        if normalized in {"lax", "strict"}:
            app.config["SESSION_COOKIE_SAMESITE"] = normalized.capitalize()
        elif normalized == "none":
            app.config["SESSION_COOKIE_SAMESITE"] = "None"
        else:
            logger.warning(
                "Invalid WEB_PORTAL_COOKIE_SAMESITE=%s; expected Lax, Strict or None.",
                raw,
            )

    raw = os.getenv("WEB_PORTAL_COOKIE_NAME")
    if raw is not None:
        app.config["SESSION_COOKIE_NAME"] = raw.strip() or "session"


def _parse_proxy_count(raw: str) -> int:
    raw = raw.strip().lower()
    if raw in _TRUTHY:
        return 1
    try:
        count = int(raw)
    except ValueError:
        return 0
    return max(0, count)


def _apply_proxy_fix(app: Flask) -> None:
    raw = os.getenv("WEB_PORTAL_TRUST_PROXY")
    if not raw:
        return
    count = _parse_proxy_count(raw)
    if count <= 0:
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=count, x_proto=count, x_host=count)


def create_app(
    *,
    store: FilterStateStore | None = None,
    secret_key: str | None = None,
    load_env: bool = True,
) -> Flask:
    """Create and configure the Flask application."""
    if load_env:
        load_dotenv(dotenv_path=ENV_FILE)
        configure_logging()
    app = Flask(__name__)
    app.secret_key = secret_key or _require_secret_key()
    _apply_session_cookie_settings(app)
    _apply_proxy_fix(app)
    app.extensions[STORE_EXTENSION] = store if store is not None else FilterStateStore()
    register_blueprints(app)
    return app


def main() -> None:
    """Run the development server."""
    app = create_app()
    host = os.getenv("WEB_PORTAL_HOST", "127.0.0.1")
    port = int(os.getenv("WEB_PORTAL_PORT", "8000"))
    try:
        app.run(host=host, port=port)
    finally:
        close_db_pool()


if __name__ == "__main__":
    main()
