from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from mediecho.database import Base


def default_settings():
    return {"privacy_local_first": True, "notifications": True}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=True)
    stripe_customer_id = Column(String(255), nullable=True, index=True)
    stripe_subscription_id = Column(String(255), nullable=True)
    subscription_plan = Column(String(20), nullable=False, default="free")
    subscription_status = Column(String(20), nullable=False, default="none")
    subscription_end_date = Column(DateTime, nullable=True)
    settings = Column(JSON, nullable=False, default=default_settings)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    logs = relationship(
        "Log", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    weekly_briefs = relationship(
        "WeeklyBrief",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    PLANS = ["free", "pro", "coach"]
    STATUSES = ["active", "past_due", "canceled", "trialing", "none"]
    ENTITLED_STATUSES = ("active", "trialing")

    @property
    def display_name(self):
        return self.name or self.email

    @property
    def has_active_subscription(self):
        return self.subscription_status in self.ENTITLED_STATUSES

    def wants_notifications(self) -> bool:
        return bool((self.settings or {}).get("notifications", True))

    def __repr__(self):
        return f"<User {self.email}>"
