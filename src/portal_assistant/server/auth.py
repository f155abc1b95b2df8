"""Password hashing and signed bearer tokens."""

from __future__ import annotations

import logging
from typing import Any, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from .models import User

__all__ = ["TokenSigner", "hash_password", "verify_password"]

logger = logging.getLogger(__name__)

TOKEN_MAX_AGE = 7 * 24 * 3600


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(user: Optional[User], password: str) -> bool:
    return user is not None and check_password_hash(user.password_hash, password)


class TokenSigner:
    """Issues and checks ``{sub, email, role}`` tokens signed with the app secret."""

    salt = "auth-token"

    def __init__(self, secret: str, max_age: int = TOKEN_MAX_AGE) -> None:
        self._serializer = URLSafeTimedSerializer(secret, salt=self.salt)
        self.max_age = max_age

    def issue(self, user: User) -> str:
        return self._serializer.dumps({"sub": user.id, "email": user.email, "role": user.role})

    def verify(self, token: str) -> Optional[dict[str, Any]]:
        """Return the token claims, or None when the token is expired or tampered with."""
        try:
            return self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.info("Rejected expired token")
        except BadSignature:
            logger.warning("Rejected token with a bad signature")
        return None
