# backend/grocer/routes/system.py
"""
System health endpoint.

Reports whether the data store loaded and where it persists, for deployment
debugging on the till machine.
"""

import time
from flask import Blueprint, current_app
from ..extensions import get_store

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    start_time = time.time()
    try:
        store = get_store()
        details = {
            "categories": len(store.categories),
            "products": len(store.products),
            "transactions": len(store.transactions),
            "records": repr(store.records),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Data store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Data store error",
        }


@system_bp.get("/api/health")
def health():
    store_health = check_store_health()
    status_code = 200 if store_health["status"] == "healthy" else 503
    return {"status": store_health["status"], "store": store_health}, status_code
