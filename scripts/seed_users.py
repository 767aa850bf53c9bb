#!/usr/bin/env python3
"""
Seed script to create a demo account with a week of journal entries.

Usage:
    export SEED_PASSWORD_DEMO="your_password"
    python scripts/seed_users.py
"""
import os
import sys
from datetime import timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from mediecho.auth.utils import get_password_hash
from mediecho.config import get_settings
from mediecho.database import SessionLocal, init_db
from mediecho.models import Log, User
from mediecho.timeutils import utc_now, week_bounds


DEMO_USER = {
    "name": "Demo User",
    "email": "demo@mediecho.app",
    "plan": "pro",
    "password_env": "SEED_PASSWORD_DEMO",
}

# (day offset from Monday, type, tone, text, meta)
DEMO_LOGS = [
    (0, "symptom", "negative", "Tension headache after a long day at the desk", {"intensity": 6, "tags": ["headache"]}),
    (1, "fitness", "positive", "30 minute run, felt strong", {"duration": 1800, "tags": ["running"]}),
    (2, "symptom", "urgent", "Sharp pain behind the left eye, lasted an hour", {"intensity": 9, "tags": ["headache", "eye"]}),
    (3, "food", "neutral", "Skipped lunch, big dinner", {"tags": ["diet"]}),
    (4, "mood", "calm", "Slept well, relaxed evening", {"intensity": 3}),
]


def seed_users():
    """Create the demo account and its logs for the current week."""
    init_db()
    settings = get_settings()
    db = SessionLocal()

    try:
        email = DEMO_USER["email"]
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"Skipped: {email} already exists")
            return

        password = os.getenv(DEMO_USER["password_env"])
        if not password:
            print(f"Error: missing {DEMO_USER['password_env']} env var")
            sys.exit(1)

        user = User(
            name=DEMO_USER["name"],
            email=email,
            password_hash=get_password_hash(password),
            subscription_plan=DEMO_USER["plan"],
            subscription_status="active",
        )
        db.add(user)
        db.flush()

        week_start, _ = week_bounds(settings.app_timezone)
        now = utc_now()
        for offset, log_type, tone, text, meta in DEMO_LOGS:
            created_at = week_start + timedelta(days=offset, hours=9)
            if created_at > now:
                continue
            db.add(
                Log(
                    user_id=user.id,
                    type=log_type,
                    tone=tone,
                    text=text,
                    meta=meta,
                    created_at=created_at,
                    updated_at=created_at,
                )
            )

        db.commit()
        print(f"Created: {DEMO_USER['name']} ({email}) - {DEMO_USER['plan']}")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    seed_users()
