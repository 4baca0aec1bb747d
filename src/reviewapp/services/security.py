"""Password and one-time secret hashing."""

import secrets
import string

from passlib.context import CryptContext

# Passwords and emailed one-time secrets share one salted scheme.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def hash_secret(secret: str) -> str:
    """Hash a one-time token before it is stored."""
    return pwd_context.hash(secret)


def verify_secret(secret: str | None, secret_hash: str) -> bool:
    """Compare a submitted one-time token against its stored hash."""
    if not secret:
        return False
    return pwd_context.verify(secret, secret_hash)


def generate_otp(length: int = 6) -> str:
    """Generate a numeric one-time passcode."""
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_reset_token(nbytes: int = 30) -> str:
    """Generate a random hex token for password reset links."""
    return secrets.token_hex(nbytes)
