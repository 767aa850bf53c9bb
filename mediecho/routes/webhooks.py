import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from mediecho.config import Settings, get_settings
from mediecho.database import get_db
from mediecho.services.billing import StripeService, process_stripe_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Stripe webhook endpoint.

    Verifies the signature against the raw body, then mirrors the event onto
    the matching user.
    """
    sig = request.headers.get("stripe-signature")
    if not sig:
        raise HTTPException(status_code=400, detail="Missing Stripe-Signature header")

    payload = await request.body()
    try:
        event = StripeService(settings).construct_event(payload, sig)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Rejected Stripe webhook: {e}")
        raise HTTPException(status_code=400, detail="Invalid webhook signature")

    result = process_stripe_event(db, event, settings)
    return {"received": True, "result": result}
