"""Registration, login and access-key resolution.

Passwords are hashed with bcrypt via passlib and never stored or logged in
plaintext. Access keys are opaque bearer tokens issued once at registration;
they do not expire and are never rotated.
"""

import logging
import secrets

from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import (
    AuthenticationInvalidError,
    AuthenticationRequiredError,
    InvalidCredentialsError,
    UsernameTakenError,
    ValidationError,
)
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

ACCESS_KEY_PREFIX = "BC_"
# 12 random bytes -> 24 hex chars after the prefix.
ACCESS_KEY_BYTES = 12
# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def generate_access_key() -> str:
    return f"{ACCESS_KEY_PREFIX}{secrets.token_hex(ACCESS_KEY_BYTES)}"


def register_user(db: Session, username: str, password: str) -> User:
    """Create a new user account and issue its access key.

    Raises UsernameTakenError if the username already exists and
    ValidationError on empty or oversized input.
    """
    username = username.strip()
    if not username:
        raise ValidationError("Username required", field="username")
    if not password:
        raise ValidationError("Password required", field="password")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
        )

    repo = UserRepository(db)
    if repo.get_by_username(username) is not None:
        raise UsernameTakenError(username)

    access_key = generate_access_key()
    while repo.access_key_exists(access_key):
        access_key = generate_access_key()

    user = User(
        username=username,
        password_hash=bcrypt.hash(password),
        access_key=access_key,
    )
    try:
        user = repo.add(user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same name.
        db.rollback()
        raise UsernameTakenError(username) from e

    logger.info("User registered", extra={"user_id": user.id, "username": username})
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """Validate credentials and return the user.

    Raises InvalidCredentialsError on unknown username or wrong password.
    """
    user = UserRepository(db).get_by_username(username.strip())

    if user is None or not bcrypt.verify(password, user.password_hash):
        logger.info("Login failed", extra={"username": username})
        raise InvalidCredentialsError()

    return user


def get_user_by_access_key(db: Session, access_key: str | None) -> User:
    """Resolve an ``X-API-Key`` header value to its user.

    Raises AuthenticationRequiredError when no key is supplied and
    AuthenticationInvalidError when the key is unknown.
    """
    if not access_key:
        raise AuthenticationRequiredError()

    user = UserRepository(db).get_by_access_key(access_key)
    if user is None:
        raise AuthenticationInvalidError()
    return user
