"""
Stripe Billing Service

Checkout and portal sessions for the paid plans, plus the webhook handler that
mirrors Stripe subscription state onto the user row.

ARCHITECTURE:
- Stripe configuration comes from Settings; a missing secret key fails closed
  with BillingNotConfiguredError (503)
- Webhooks are the source of truth for plan and status
- Users are matched by stripe_customer_id
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import stripe
from sqlalchemy.orm import Session

from mediecho.config import Settings
from mediecho.errors import BillingNotConfiguredError, ValidationError
from mediecho.models import User

logger = logging.getLogger(__name__)

PLAN_PRICES = {
    "pro": {"monthly": 999, "yearly": 9999},
    "coach": {"monthly": 1499, "yearly": 14999},
}
PLAN_NAMES = {"pro": "Pro", "coach": "Coach"}
CURRENCY = "usd"

# Stripe statuses with no direct counterpart in User.STATUSES
STRIPE_STATUS_MAP = {
    "unpaid": "past_due",
    "incomplete": "past_due",
    "incomplete_expired": "canceled",
    "paused": "canceled",
}


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a Stripe object or a plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _first_price_id(subscription: Any) -> Optional[str]:
    items = _get(subscription, "items")
    data = _get(items, "data") or []
    if not data:
        return None
    price = _get(data[0], "price")
    price_id = _get(price, "id")
    return str(price_id) if price_id else None


def _extract_current_period_end(subscription: Any) -> Optional[datetime]:
    """
    Period end as naive UTC.

    Older API versions put current_period_end on the subscription; newer ones
    put it on each subscription item.
    """
    ts = _get(subscription, "current_period_end")
    if ts is None:
        items = _get(subscription, "items")
        ends = [
            int(_get(item, "current_period_end"))
            for item in (_get(items, "data") or [])
            if _get(item, "current_period_end") is not None
        ]
        ts = max(ends) if ends else None
    if ts is None:
        return None
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).replace(tzinfo=None)


def plan_for_price(price_id: Optional[str], settings: Settings) -> Optional[str]:
    """Map a Stripe price id to a plan name, or None when it is not recognised."""
    if not price_id:
        return None
    if price_id in settings.coach_price_ids:
        return "coach"
    if price_id in settings.pro_price_ids:
        return "pro"
    lowered = price_id.lower()
    if "coach" in lowered:
        return "coach"
    if "pro" in lowered:
        return "pro"
    return None


def subscription_status_for(stripe_status: Optional[str]) -> Optional[str]:
    """Map a Stripe subscription status onto User.STATUSES, or None to leave it unchanged."""
    if not stripe_status:
        return None
    status = str(stripe_status)
    if status in User.STATUSES:
        return status
    if status in STRIPE_STATUS_MAP:
        return STRIPE_STATUS_MAP[status]
    logger.warning(f"Ignoring unknown Stripe subscription status {status}")
    return None


def plans_catalogue(settings: Settings) -> List[Dict[str, Any]]:
    """Public list of paid plans with their configured price ids."""
    price_ids = {
        "pro": {
            "monthly": settings.stripe_price_pro_monthly,
            "yearly": settings.stripe_price_pro_yearly,
        },
        "coach": {
            "monthly": settings.stripe_price_coach_monthly,
            "yearly": settings.stripe_price_coach_yearly,
        },
    }
    return [
        {
            "id": plan,
            "name": PLAN_NAMES[plan],
            "currency": CURRENCY,
            "prices": {
                period: {"amount": amount, "price_id": price_ids[plan][period]}
                for period, amount in PLAN_PRICES[plan].items()
            },
        }
        for plan in ("pro", "coach")
    ]


class StripeService:
    def __init__(self, settings: Settings):
        if not settings.stripe_secret_key:
            raise BillingNotConfiguredError("Billing is not configured")
        stripe.api_key = settings.stripe_secret_key
        self.settings = settings

    @property
    def default_success_url(self) -> str:
        return f"{self.settings.app_url}/app/settings?success=true"

    @property
    def default_cancel_url(self) -> str:
        return f"{self.settings.app_url}/app/settings?canceled=true"

    def ensure_customer(self, db: Session, user: User) -> str:
        """Return the user's Stripe customer id, creating the customer on first use."""
        if user.stripe_customer_id:
            return user.stripe_customer_id

        customer = stripe.Customer.create(
            email=user.email,
            name=user.name or None,
            metadata={"user_id": str(user.id)},
        )
        user.stripe_customer_id = str(customer.id)
        db.commit()
        logger.info(f"Created Stripe customer {customer.id} for user {user.id}")
        return user.stripe_customer_id

    def create_checkout_session(
        self,
        db: Session,
        user: User,
        price_id: str,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> Dict[str, str]:
        customer_id = self.ensure_customer(db, user)
        session = stripe.checkout.Session.create(
            customer=customer_id,
            mode="subscription",
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=success_url or self.default_success_url,
            cancel_url=cancel_url or self.default_cancel_url,
            client_reference_id=str(user.id),
            metadata={"user_id": str(user.id)},
        )
        return {"session_id": str(session.id), "url": str(session.url)}

    def create_portal_session(self, user: User) -> Dict[str, str]:
        if not user.stripe_customer_id:
            raise ValidationError("No active subscription found")
        session = stripe.billing_portal.Session.create(
            customer=user.stripe_customer_id,
            return_url=f"{self.settings.app_url}/app/settings",
        )
        return {"url": str(session.url)}

    def verify_session(self, session_id: str) -> Dict[str, Any]:
        session = stripe.checkout.Session.retrieve(session_id)
        details = _get(session, "customer_details")
        return {
            "status": _get(session, "payment_status"),
            "customer_email": _get(details, "email"),
        }

    def construct_event(self, payload: bytes, sig_header: str):
        if not self.settings.stripe_webhook_secret:
            raise BillingNotConfiguredError("Stripe webhook secret not configured")
        return stripe.Webhook.construct_event(
            payload=payload,
            sig_header=sig_header,
            secret=self.settings.stripe_webhook_secret,
        )


def subscription_status(user: User) -> Dict[str, Any]:
    return {
        "plan": user.subscription_plan,
        "status": user.subscription_status,
        "end_date": user.subscription_end_date,
        "has_stripe_customer": bool(user.stripe_customer_id),
    }


def process_stripe_event(db: Session, event: Any, settings: Settings) -> Dict[str, Any]:
    """
    Apply a verified Stripe event to the matching user.

    Returns a small result dict for the webhook response and logs.
    """
    event_type = str(_get(event, "type") or "")
    obj = _get(_get(event, "data"), "object")
    customer_id = _get(obj, "customer")

    handled = (
        "checkout.session.completed",
        "invoice.payment_succeeded",
        "invoice.payment_failed",
        "customer.subscription.updated",
        "customer.subscription.deleted",
    )
    if event_type not in handled:
        logger.info(f"Unhandled Stripe event type {event_type}")
        return {"processed": False, "event_type": event_type}

    user = None
    if customer_id:
        user = db.query(User).filter(User.stripe_customer_id == str(customer_id)).first()
    if not user:
        logger.warning(f"Stripe event {event_type} for unknown customer {customer_id}")
        return {"processed": True, "event_type": event_type, "matched_user": False}

    if event_type == "checkout.session.completed":
        user.subscription_status = "active"
        subscription_id = _get(obj, "subscription")
        if subscription_id:
            user.stripe_subscription_id = str(subscription_id)

    elif event_type == "invoice.payment_succeeded":
        user.subscription_status = "active"
        subscription_id = _get(obj, "subscription")
        if subscription_id:
            user.stripe_subscription_id = str(subscription_id)

    elif event_type == "invoice.payment_failed":
        user.subscription_status = "past_due"

    elif event_type == "customer.subscription.updated":
        status = subscription_status_for(_get(obj, "status"))
        if status:
            user.subscription_status = status
        user.stripe_subscription_id = str(_get(obj, "id"))
        plan = plan_for_price(_first_price_id(obj), settings)
        if plan:
            user.subscription_plan = plan
        period_end = _extract_current_period_end(obj)
        if period_end:
            user.subscription_end_date = period_end

    elif event_type == "customer.subscription.deleted":
        user.subscription_status = "canceled"
        user.subscription_plan = "free"
        user.stripe_subscription_id = None

    db.commit()
    logger.info(
        f"Applied {event_type} to user {user.id}: "
        f"plan={user.subscription_plan} status={user.subscription_status}"
    )
    return {"processed": True, "event_type": event_type, "user_id": user.id}
