"""Subscription gate: plan membership and live status checks."""

from typing import Iterable

from fastapi import Depends

from mediecho.auth.utils import get_current_user
from mediecho.config import Settings, get_settings
from mediecho.errors import PaymentRequiredError
from mediecho.models import User


def check_subscription(user: User, allowed_plans: Iterable[str]) -> None:
    """Raise PaymentRequiredError unless the user may use a plan-gated feature."""
    allowed = sorted(allowed_plans)
    if not user.has_active_subscription:
        raise PaymentRequiredError(
            "Active subscription required",
            code="PAYMENT_REQUIRED",
            required_plans=allowed,
        )
    if user.subscription_plan not in allowed:
        raise PaymentRequiredError(
            f"This feature requires a {' or '.join(allowed)} subscription",
            code="PAYMENT_REQUIRED",
            required_plans=allowed,
        )


def require_brief_plan(
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> User:
    """Dependency gating brief generation and download."""
    check_subscription(user, settings.brief_plans)
    return user
