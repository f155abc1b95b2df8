"""Stripe checkout for credit packs and the webhook that credits them."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import stripe
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from portal_assistant.config import AppConfig

from .models import CreditPurchase, User, db

__all__ = ["PaymentError", "create_checkout", "handle_event", "parse_event"]

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """A checkout request that cannot be served; carries the HTTP status to answer with."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


def create_checkout(config: AppConfig, pack: Any, user_id: Any) -> dict[str, Any]:
    """Open a one-off payment session for *pack* (a credits count) on behalf of *user_id*."""
    price_id = config.stripe_prices.get(str(pack))
    if not price_id:
        raise PaymentError(f"Unknown credit pack: {pack}", 400)

    uid = _as_int(user_id)
    user = db.session.get(User, uid) if uid is not None else None
    if user is None:
        raise PaymentError("User not found", 404)

    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            line_items=[{"price": price_id, "quantity": 1}],
            customer_email=user.email,
            client_reference_id=str(user.id),
            metadata={"userId": str(user.id), "credits": str(pack)},
            success_url=f"{config.app_base_url}/?checkout=success",
            cancel_url=f"{config.app_base_url}/?checkout=cancel",
        )
    except stripe.StripeError as exc:
        logger.error("Stripe checkout failed for user %s: %s", user.id, exc)
        raise PaymentError("Payment provider error", 502) from exc

    logger.info("Checkout session %s opened for user %s (%s credits)", session.id, user.id, pack)
    return {"url": session.url, "publicKey": config.stripe_public_key}


def parse_event(payload: bytes, signature: str | None, secret: str | None) -> Any:
    """Verify and decode a webhook body; raises ValueError or SignatureVerificationError."""
    if not secret:
        raise ValueError("STRIPE_WEBHOOK_SECRET is not configured")
    return stripe.Webhook.construct_event(payload, signature, secret)


def handle_event(event: Mapping[str, Any]) -> bool:
    """
    Apply one verified webhook event.

    Returns True when credits were added. A completed session is credited at
    most once: a replayed event hits the unique session id and is ignored.
    """
    event_type = event["type"]
    if event_type != "checkout.session.completed":
        logger.info("Ignoring Stripe event %s", event_type)
        return False

    try:
        session = event["data"]["object"]
        session_id = session["id"]
        paid = session["payment_status"] == "paid"
        metadata = session["metadata"]
        user_id = _as_int(metadata["userId"])
        credits = _as_int(metadata["credits"])
    except (KeyError, TypeError) as exc:
        logger.error("Malformed checkout.session.completed event: %r", exc)
        return False

    if not paid:
        logger.info("Checkout session %s not paid yet", session_id)
        return False
    if user_id is None or credits is None or credits <= 0:
        logger.error("Checkout session %s has unusable metadata", session_id)
        return False

    db.session.add(CreditPurchase(stripe_session_id=session_id, user_id=user_id, credits=credits))
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        logger.info("Checkout session %s already credited", session_id)
        return False

    result = db.session.execute(
        update(User).where(User.id == user_id).values(credits=User.credits + credits)
    )
    if result.rowcount != 1:
        db.session.rollback()
        logger.error("Checkout session %s names unknown user %s", session_id, user_id)
        return False

    db.session.commit()
    logger.info("Credited %d credits to user %s", credits, user_id)
    return True


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
