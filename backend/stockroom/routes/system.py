# backend/stockroom/routes/system.py
"""
System health endpoint.

Checks database connectivity so a load balancer or uptime probe can tell a
running process from a working one.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text
from ..extensions import db

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial query.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health_route():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return {
        "status": "ok" if healthy else "degraded",
        "database": database,
    }, 200 if healthy else 503
