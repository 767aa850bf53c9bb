from mediecho.models.user import User
from mediecho.models.log import Log
from mediecho.models.weekly_brief import WeeklyBrief

__all__ = [
    "User",
    "Log",
    "WeeklyBrief",
]
