# arrivals/models/authorized_user.py
"""
Authorized admins — the allow-list consulted before any billboard mutation.
Rows come from AUTHORIZED_USERS at startup or from the first-login bootstrap.
"""

from sqlalchemy import Column, Integer, String, DateTime
from arrivals.database import Base


class AuthorizedUser(Base):
    __tablename__ = "authorized_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(200))
    source = Column(String(20), nullable=False, default="env")   # env | bootstrap
    added_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<AuthorizedUser {self.user_id} name={self.name}>"
