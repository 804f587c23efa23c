"""
Bearer-token authentication.

Passwords are stored as bcrypt hashes; tokens are HS256 JWTs carrying the
user id. `get_current_user` is the gate in front of every protected route:
it rejects the request before the handler runs when the token is missing,
invalid, expired or points at a user that no longer exists.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from database import Document, DocumentStore
from dependencies import get_settings, get_store
from errors import AuthenticationError
from settings import Settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def issue_token(user_id: str, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_token(token: str, settings: Settings) -> str:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired, please log in again") from e
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid token, please log in again") from e
    user_id = payload.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise AuthenticationError("Invalid token, please log in again")
    return user_id


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_store),
) -> Document:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("You are not logged in, please provide a bearer token")
    user_id = decode_token(credentials.credentials, settings)
    user = store.find_by_id("user", user_id)
    if user is None:
        logger.warning(f"Token presented for missing user {user_id}")
        raise AuthenticationError("The user belonging to this token no longer exists")
    return user
