import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from mediecho.auth import get_current_user
from mediecho.config import Settings, get_settings
from mediecho.database import get_db
from mediecho.models import User
from mediecho.schemas import CheckoutRequest
from mediecho.services.billing import StripeService, plans_catalogue, subscription_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["subscription"])


def get_stripe_service(settings: Settings = Depends(get_settings)) -> StripeService:
    return StripeService(settings)


@router.get("/plans")
def list_plans(settings: Settings = Depends(get_settings)):
    return {"success": True, "plans": plans_catalogue(settings)}


@router.get("")
def get_subscription(user: User = Depends(get_current_user)):
    return {"success": True, "subscription": subscription_status(user)}


@router.post("/checkout")
def create_checkout(
    data: CheckoutRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: StripeService = Depends(get_stripe_service),
):
    """Start a Stripe Checkout session for a plan price."""
    try:
        session = service.create_checkout_session(
            db, user, data.price_id, data.success_url, data.cancel_url
        )
    except stripe.StripeError as e:
        logger.error(f"Checkout session failed for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create checkout session")
    return {"success": True, **session}


@router.post("/portal")
def create_portal(
    user: User = Depends(get_current_user),
    service: StripeService = Depends(get_stripe_service),
):
    try:
        session = service.create_portal_session(user)
    except stripe.StripeError as e:
        logger.error(f"Portal session failed for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create portal session")
    return {"success": True, **session}


@router.get("/verify-session")
def verify_session(
    session_id: str = Query(None),
    service: StripeService = Depends(get_stripe_service),
):
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID required")
    try:
        result = service.verify_session(session_id)
    except stripe.StripeError as e:
        logger.error(f"Session verification failed for {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to verify session")
    return {"success": True, **result}
