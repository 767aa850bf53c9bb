from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from mediecho.database import Base


class Log(Base):
    __tablename__ = "logs"
    __table_args__ = (
        Index("ix_logs_user_id_created_at", "user_id", "created_at"),
        Index("ix_logs_user_id_type", "user_id", "type"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type = Column(String(20), nullable=False)
    text = Column(Text, nullable=False)
    tone = Column(String(20), nullable=True)
    # duration, transcription_confidence, ai_summary, tags, intensity
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user = relationship("User", back_populates="logs")

    TYPES = ["symptom", "fitness", "food", "mood", "voice"]
    TONES = ["positive", "negative", "neutral", "anxious", "calm", "urgent"]

    @property
    def intensity(self):
        """Intensity lives in meta; None when the entry does not declare one."""
        return (self.meta or {}).get("intensity")

    @property
    def tags(self):
        return list((self.meta or {}).get("tags") or [])

    def __repr__(self):
        return f"<Log {self.type} #{self.id}>"
