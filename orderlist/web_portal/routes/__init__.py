"""Blueprint registration for order list routes."""

from __future__ import annotations

from flask import Flask  # pylint: disable=import-error

from .health import bp as health_bp
from .orders import STORE_EXTENSION, bp as orders_bp


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints for portal routes."""
    app.register_blueprint(health_bp)
    app.register_blueprint(orders_bp)


__all__ = ["STORE_EXTENSION", "register_blueprints"]
