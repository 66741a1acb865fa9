# arrivals/deps.py
"""
FastAPI dependencies: the per-app shared objects created at startup, and the
admin gate that stands in front of every billboard mutation.
"""

from datetime import datetime
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session
from arrivals.database import get_db
from arrivals.models.authorized_user import AuthorizedUser
from arrivals.services.billboard_store import Actor, GlobalBillboardStore
from arrivals.services.directory_client import DirectoryClient
from arrivals.services.pickup_requests import PickupRequestLog
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


def get_billboard_store(request: Request) -> GlobalBillboardStore:
    return request.app.state.billboard_store


def get_pickup_requests(request: Request) -> PickupRequestLog:
    return request.app.state.pickup_requests


def get_directory(request: Request) -> DirectoryClient:
    return request.app.state.directory


def require_admin(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-ID"),
    x_user_name: Optional[str] = Header(default=None, alias="X-User-Name"),
    db: Session = Depends(get_db),
) -> Actor:
    """
    Resolve the calling admin. While the allow-list is empty the first caller
    is enrolled, so a fresh install always has someone able to log in.
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User ID required")

    user = db.query(AuthorizedUser).filter(AuthorizedUser.user_id == x_user_id).first()
    if user is None:
        if db.query(AuthorizedUser).count() > 0:
            logger.warning(f"Rejected billboard mutation from unauthorized user {x_user_id}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not authorized")
        user = AuthorizedUser(user_id=x_user_id, name=x_user_name, source="bootstrap",
                              added_at=datetime.utcnow())
        db.add(user)
        db.commit()
        logger.warning(f"👤 Allow-list was empty — enrolled first user {x_user_id} as admin")
    elif x_user_name and not user.name:
        user.name = x_user_name
        db.commit()

    return Actor(id=user.user_id, name=user.name or "Unknown User")
