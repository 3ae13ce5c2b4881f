# backend/shoppos/routes/system.py
"""System health endpoint."""

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db

system_bp = Blueprint("system", __name__)


@system_bp.get("/api/health")
def health():
    """Database connectivity check with latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        db.session.rollback()
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }, 503

    return {
        "status": "healthy",
        "latency_ms": round((time.time() - start_time) * 1000, 2),
    }, 200
