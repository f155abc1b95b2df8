"""HTTP backend: accounts, credits and Stripe payments."""

from .app import create_app, seed_admin
from .models import CreditPurchase, User, db

__all__ = ["CreditPurchase", "User", "create_app", "db", "seed_admin"]
