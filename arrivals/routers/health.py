# arrivals/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + upstream check-in service reachability.
"""

import requests
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from arrivals.database import get_db
from arrivals.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity (authorized-user allow-list)
    - Upstream check-in API reachability and credential validity
    - Whether a billboard is currently active
    """
    store = request.app.state.billboard_store
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "upstream": "unknown",
        "activeBillboard": store.get_active() is not None,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except SQLAlchemyError as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    try:
        resp = requests.get(
            f"{settings.PCO_API_BASE}/events",
            params={"per_page": 1},
            auth=(settings.PCO_ACCESS_TOKEN, settings.PCO_ACCESS_SECRET),
            timeout=3,
        )
        if resp.status_code == 200:
            result["upstream"] = "ok"
        else:
            result["upstream"] = "auth_failed" if resp.status_code == 401 else f"http_{resp.status_code}"
            result["status"] = "degraded"
    except requests.exceptions.ConnectionError:
        result["upstream"] = "unreachable"
        result["status"] = "degraded"
    except requests.exceptions.Timeout:
        result["upstream"] = "timeout"
        result["status"] = "degraded"
    except requests.exceptions.RequestException as e:
        result["upstream"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
