"""Session token issuing and verification (JWT)."""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from reviewapp.config import Settings, settings
from reviewapp.models import User


class AuthError(Exception):
    """Authentication error."""

    pass


def create_token(user: User, config: Settings | None = None) -> str:
    """Create a signed bearer token asserting the user's identity."""
    config = config or settings
    now = datetime.now(UTC)
    payload = {
        "sub": str(user.id),
        "exp": now + timedelta(days=config.jwt_expiration_days),
        "iat": now,
    }
    return jwt.encode(payload, config.session_secret, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: Settings | None = None) -> dict:
    """Decode and validate a JWT token."""
    config = config or settings
    try:
        payload = jwt.decode(
            token,
            config.session_secret,
            algorithms=[config.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        raise AuthError(f"Invalid token: {e}") from e


async def verify_token(session: AsyncSession, token: str, config: Settings | None = None) -> User:
    """Verify a JWT token and return the associated user."""
    payload = decode_token(token, config)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid token: missing user ID")

    stmt = select(User).where(User.id == user_id)
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()

    if not user:
        raise AuthError("User not found")

    return user
