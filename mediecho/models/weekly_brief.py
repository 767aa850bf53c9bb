"""
Weekly Brief Model

One row per (user, week window). The summary is stored encrypted as
``{"iv": <hex>, "content": <hex>}``; the rendered PDF lives on disk at
``pdf_path``.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    ForeignKey,
    JSON,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from mediecho.database import Base
from mediecho.timeutils import to_local


class WeeklyBrief(Base):
    __tablename__ = "weekly_briefs"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "week_start", "week_end", name="uq_weekly_briefs_user_window"
        ),
        Index("ix_weekly_briefs_user_id_week_end", "user_id", "week_end"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    week_start = Column(DateTime, nullable=False)
    week_end = Column(DateTime, nullable=False)
    summary = Column(JSON, nullable=True)
    encrypted = Column(Boolean, nullable=False, default=True)
    pdf_path = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="generating")
    logs_count = Column(Integer, nullable=False, default=0)
    generated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="weekly_briefs")

    STATUSES = ["generating", "completed", "failed"]

    def download_filename(self, tz_name: str) -> str:
        """Named after the window's last local day."""
        end_day = to_local(self.week_end, tz_name).date()
        return f"weekly-brief-{end_day.isoformat()}.pdf"

    def to_metadata(self) -> dict:
        """Public view of the brief: never the summary or the PDF bytes."""
        return {
            "id": self.id,
            "week_start": self.week_start,
            "week_end": self.week_end,
            "logs_count": self.logs_count,
            "status": self.status,
            "generated_at": self.generated_at,
        }

    def __repr__(self):
        return f"<WeeklyBrief user={self.user_id} {self.week_start:%Y-%m-%d}>"
