"""JSON API: health, accounts, credit usage and Stripe payments."""

from __future__ import annotations

import logging
from typing import Any, Optional

import stripe
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import update

from portal_assistant.config import AppConfig

from .auth import TokenSigner, hash_password, verify_password
from .models import User, db
from .payments import PaymentError, create_checkout, handle_event, parse_event

__all__ = ["api"]

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


def _config() -> AppConfig:
    return current_app.extensions["portal_config"]


def _signer() -> TokenSigner:
    return current_app.extensions["portal_tokens"]


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _bearer_claims() -> Optional[dict[str, Any]]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return _signer().verify(token.strip())


@api.get("/health")
def health():
    return jsonify({"ok": True})


@api.post("/login")
def login():
    body = _json_body()
    email = str(body.get("email") or "").strip().lower()
    password = str(body.get("password") or "")
    if not email or not password:
        return _error("Email and password are required", 400)

    user = User.query.filter_by(email=email).first()
    if not verify_password(user, password):
        logger.info("Failed login for %s", email)
        return _error("Invalid credentials", 401)

    return jsonify({"token": _signer().issue(user), "user": user.to_dict()})


@api.post("/signup")
def signup():
    body = _json_body()
    name = str(body.get("name") or "").strip()
    email = str(body.get("email") or "").strip().lower()
    password = str(body.get("password") or "")
    if not name or not email or not password:
        return _error("Name, email and password are required", 400)

    if User.query.filter_by(email=email).first() is not None:
        return _error("Email already registered", 409)

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role="student",
        credits=_config().new_user_starting_credits,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("New user %s signed up", user.id)
    return jsonify(user.to_dict()), 201


@api.get("/users/<int:user_id>")
def get_user(user_id: int):
    user = db.session.get(User, user_id)
    if user is None:
        return _error("User not found", 404)
    return jsonify(user.to_dict())


@api.post("/users/<int:user_id>/use-credit")
def use_credit(user_id: int):
    claims = _bearer_claims()
    if claims is None:
        return _error("Authentication required", 401)
    if claims.get("sub") != user_id and claims.get("role") != "admin":
        return _error("Forbidden", 403)

    cost = _config().assistant_credit_cost
    result = db.session.execute(
        update(User)
        .where(User.id == user_id, User.credits >= cost)
        .values(credits=User.credits - cost)
    )
    db.session.commit()

    user = db.session.get(User, user_id)
    if user is None:
        return _error("User not found", 404)
    if result.rowcount != 1:
        return jsonify({"error": "Insufficient credits", "credits": user.credits}), 402
    return jsonify({"credits": user.credits})


@api.post("/payments/create-checkout")
def payments_create_checkout():
    body = _json_body()
    try:
        session = create_checkout(_config(), body.get("pack"), body.get("userId"))
    except PaymentError as exc:
        return _error(str(exc), exc.status)
    return jsonify(session)


@api.post("/payments/webhook")
def payments_webhook():
    try:
        event = parse_event(
            request.get_data(),
            request.headers.get("Stripe-Signature"),
            _config().stripe_webhook_secret,
        )
    except (ValueError, stripe.SignatureVerificationError) as exc:
        logger.warning("Rejected Stripe webhook: %s", exc)
        return _error("Invalid payload or signature", 400)

    handle_event(event)
    return jsonify({"received": True})
