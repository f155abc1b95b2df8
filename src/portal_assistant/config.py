"""
Environment-driven configuration.

Everything is read once through `AppConfig.from_env`, after `load_dotenv()`
has merged a local ``.env`` file into the process environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final, Mapping, Optional

from dotenv import load_dotenv

__all__ = [
    "AppConfig",
    "CreditPackage",
    "DEFAULT_CREDIT_PACKAGES",
    "Provider",
    "get_api_key",
    "parse_credit_packages",
]

logger = logging.getLogger(__name__)


class Provider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


# Gemini keys are also accepted under the generic name the web client used.
_KEY_ENV_VARS: Final[dict[Provider, tuple[str, ...]]] = {
    Provider.OPENAI: ("OPENAI_API_KEY",),
    Provider.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    Provider.GEMINI: ("GEMINI_API_KEY", "API_KEY"),
}

DEFAULT_MODELS: Final[dict[Provider, str]] = {
    Provider.OPENAI: "gpt-4o-mini",
    Provider.ANTHROPIC: "claude-3-5-haiku-20241022",
    Provider.GEMINI: "gemini-2.5-flash",
}


def get_api_key(provider: Provider, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the API key for *provider* or raise RuntimeError."""
    env = os.environ if environ is None else environ
    try:
        names = _KEY_ENV_VARS[provider]
    except KeyError:
        raise RuntimeError(f"No config for {provider!s}") from None

    for name in names:
        if env.get(name):
            return env[name]
    raise RuntimeError(f"{names[0]} missing")


_PACKAGE_COLORS: Final = ("green", "blue", "purple", "orange")


@dataclass(frozen=True, slots=True)
class CreditPackage:
    price: int
    credits: int
    color: str
    popular: bool = False


DEFAULT_CREDIT_PACKAGES: Final[tuple[CreditPackage, ...]] = (
    CreditPackage(price=20, credits=200, color="green"),
    CreditPackage(price=50, credits=550, color="blue", popular=True),
    CreditPackage(price=100, credits=1200, color="purple"),
)


def parse_credit_packages(raw: Optional[str]) -> Optional[tuple[CreditPackage, ...]]:
    """
    Parse ``price:credits[:color][:popular]`` entries separated by commas.

    Returns None when *raw* is empty or malformed so the caller can fall back
    to the defaults.

    >>> parse_credit_packages("10:100,30:400:popular")[1]
    CreditPackage(price=30, credits=400, color='blue', popular=True)
    """
    if not raw or not raw.strip():
        return None

    packages: list[CreditPackage] = []
    try:
        for index, entry in enumerate(raw.split(",")):
            parts = [p.strip() for p in entry.strip().split(":")]
            color = next(
                (p for p in parts[2:] if p in _PACKAGE_COLORS),
                _PACKAGE_COLORS[index % len(_PACKAGE_COLORS)],
            )
            packages.append(
                CreditPackage(
                    price=int(parts[0]),
                    credits=int(parts[1]),
                    color=color,
                    popular="popular" in parts[2:],
                )
            )
    except (ValueError, IndexError) as exc:
        logger.error("Error parsing CREDIT_PACKAGES %r, using defaults", raw, exc_info=exc)
        return None
    return tuple(packages)


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.error("%s=%r is not an integer, using %d", name, value, default)
        return default


@dataclass(slots=True)
class AppConfig:
    """Settings shared by the assistants, the CLI and the HTTP API."""

    provider: Provider = Provider.GEMINI
    model: str = DEFAULT_MODELS[Provider.GEMINI]
    assistant_credit_cost: int = 1
    new_user_starting_credits: int = 20
    credit_packages: tuple[CreditPackage, ...] = DEFAULT_CREDIT_PACKAGES

    auth_secret: str = "dev-secret-change-me"
    database_url: str = "sqlite:///data/app.db"
    app_base_url: str = "http://localhost:5173"

    stripe_secret_key: Optional[str] = None
    stripe_public_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    # credits count (as a string) -> Stripe price id
    stripe_prices: dict[str, str] = field(default_factory=dict)

    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        if environ is None:
            load_dotenv()
            environ = os.environ

        provider = Provider(environ.get("LLM_PROVIDER", Provider.GEMINI).lower())
        model = environ.get("LLM_MODEL") or DEFAULT_MODELS[provider]
        if provider is Provider.GEMINI:
            model = environ.get("GEMINI_MODEL") or model

        packages = parse_credit_packages(environ.get("CREDIT_PACKAGES")) or DEFAULT_CREDIT_PACKAGES

        prices = {}
        for package in packages:
            price_id = environ.get(f"STRIPE_PRICE_{package.credits}")
            if price_id:
                prices[str(package.credits)] = price_id

        return cls(
            provider=provider,
            model=model,
            assistant_credit_cost=_int_env(environ, "ASSISTANT_CREDIT_COST", 1),
            new_user_starting_credits=_int_env(environ, "NEW_USER_STARTING_CREDITS", 20),
            credit_packages=packages,
            auth_secret=environ.get("AUTH_SECRET", "dev-secret-change-me"),
            database_url=environ.get("DATABASE_URL", "sqlite:///data/app.db"),
            app_base_url=environ.get("APP_BASE_URL", "http://localhost:5173").rstrip("/"),
            stripe_secret_key=environ.get("STRIPE_SECRET_KEY"),
            stripe_public_key=environ.get("STRIPE_PUBLIC_KEY"),
            stripe_webhook_secret=environ.get("STRIPE_WEBHOOK_SECRET"),
            stripe_prices=prices,
            admin_email=environ.get("ADMIN_EMAIL"),
            admin_password=environ.get("ADMIN_PASSWORD"),
        )
