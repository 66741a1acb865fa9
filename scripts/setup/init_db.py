# scripts/setup/init_db.py
"""
Initialize database — creates the authorized-admin allow-list table and seeds
AUTHORIZED_USERS from .env.
Run once before first launch, or after changing AUTHORIZED_USERS.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from arrivals.database import SessionLocal, create_tables, engine, seed_authorized_users
from arrivals.models.authorized_user import AuthorizedUser
from arrivals.config import settings
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError


def main():
    print("🗄️  Arrivals Billboard DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except SQLAlchemyError as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nCheck DATABASE_URL in .env (default: sqlite:///./arrivals.db)")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ authorized_users ready")

    added = seed_authorized_users(settings.authorized_user_ids)
    print(f"👤 Seeded {added} admin(s) from AUTHORIZED_USERS")

    db = SessionLocal()
    try:
        users = db.query(AuthorizedUser).order_by(AuthorizedUser.added_at).all()
    finally:
        db.close()

    print(f"\n📊 Authorized admins ({len(users)} total):")
    for user in users:
        print(f"   ✓ {user.user_id} {user.name or ''} [{user.source}]")
    if not users:
        print("   (none yet: the first user to change the billboard becomes admin)")

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn arrivals.main:app --host {settings.BACKEND_IP} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
