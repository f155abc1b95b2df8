"""Flask application factory for the portal's JSON API."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import stripe
from flask import Flask, request

from portal_assistant.config import AppConfig

from .auth import TokenSigner, hash_password
from .models import User, db
from .routes import api

__all__ = ["create_app", "seed_admin"]

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None, **overrides: Any) -> Flask:
    """
    Build the API app.

    *overrides* are applied to ``app.config`` last, e.g. ``TESTING=True`` or a
    different ``SQLALCHEMY_DATABASE_URI``.
    """
    config = config or AppConfig.from_env()

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.auth_secret
    app.config["SQLALCHEMY_DATABASE_URI"] = config.database_url
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config.update(overrides)

    _ensure_sqlite_dir(app)

    stripe.api_key = config.stripe_secret_key
    app.extensions["portal_config"] = config
    app.extensions["portal_tokens"] = TokenSigner(config.auth_secret)

    db.init_app(app)
    app.register_blueprint(api)

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            return "", 204
        return None

    @app.after_request
    def _cors(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    with app.app_context():
        db.create_all()
        seed_admin(config)

    return app


def seed_admin(config: AppConfig) -> Optional[User]:
    """Create or promote the admin account named by ADMIN_EMAIL/ADMIN_PASSWORD."""
    if not (config.admin_email and config.admin_password):
        return None

    email = config.admin_email.strip().lower()
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(
            name="Admin",
            email=email,
            password_hash=hash_password(config.admin_password),
            role="admin",
            credits=config.new_user_starting_credits,
        )
        db.session.add(user)
        logger.info("Seeded admin user %s", email)
    elif user.role != "admin":
        user.role = "admin"
        logger.info("Promoted %s to admin", email)
    db.session.commit()
    return user


def _ensure_sqlite_dir(app: Flask) -> None:
    # Flask-SQLAlchemy resolves relative SQLite paths against the instance folder
    os.makedirs(app.instance_path, exist_ok=True)
    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    prefix = "sqlite:///"
    if not uri.startswith(prefix) or uri == "sqlite:///:memory:":
        return
    path = uri[len(prefix):]
    if not os.path.isabs(path):
        path = os.path.join(app.instance_path, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
