"""Request bodies for the JSON API."""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

LogType = Literal["symptom", "fitness", "food", "mood", "voice"]
LogTone = Literal["positive", "negative", "neutral", "anxious", "calm", "urgent"]


# -----------------------------
# Auth
# -----------------------------
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[str] = Field(default=None, max_length=50)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(alias="refreshToken", min_length=1)


class PreferencesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    privacy_local_first: Optional[bool] = Field(default=None, alias="privacyLocalFirst")
    notifications: Optional[bool] = None


class PasswordChangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=6)


# -----------------------------
# Logs
# -----------------------------
class LogMeta(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    intensity: Optional[int] = Field(default=None, ge=1, le=10)
    duration: Optional[float] = Field(default=None, ge=0)
    transcription_confidence: Optional[float] = Field(
        default=None, ge=0, le=1, alias="transcriptionConfidence"
    )
    ai_summary: Optional[str] = Field(default=None, alias="aiSummary")
    tags: List[str] = Field(default_factory=list)


class LogRequest(BaseModel):
    type: LogType
    text: str = Field(min_length=1, max_length=10000)
    tone: Optional[LogTone] = None
    meta: Optional[LogMeta] = None

    def to_store(self) -> Dict[str, Any]:
        """Plain dict for the log store; unset meta fields are dropped."""
        data: Dict[str, Any] = {"type": self.type, "text": self.text, "tone": self.tone}
        if self.meta is not None:
            data["meta"] = self.meta.model_dump(exclude_none=True)
        return data


# -----------------------------
# Briefs
# -----------------------------
class BriefGenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    week_start_date: Optional[date] = Field(default=None, alias="weekStartDate")
    week_end_date: Optional[date] = Field(default=None, alias="weekEndDate")


# -----------------------------
# Billing
# -----------------------------
class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price_id: str = Field(alias="priceId", min_length=1)
    success_url: Optional[str] = Field(default=None, alias="successUrl")
    cancel_url: Optional[str] = Field(default=None, alias="cancelUrl")
