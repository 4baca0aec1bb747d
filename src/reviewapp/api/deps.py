"""FastAPI dependencies for dependency injection."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from reviewapp.config import Settings, get_settings
from reviewapp.database import get_session
from reviewapp.models import User
from reviewapp.services.accounts import AccountService, ResetTokenGrant
from reviewapp.services.auth import AuthError, verify_token
from reviewapp.services.email import EmailService, email_service

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Security scheme
security = HTTPBearer(auto_error=False)


def get_email_service() -> EmailService:
    return email_service


async def get_current_user(
    session: SessionDep,
    config: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Get current authenticated user or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = await verify_token(session, credentials.credentials, config)
        return user
    except AuthError as e:
        logger.debug(f"Token verification failed: {e!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_account_service(
    session: SessionDep,
    config: SettingsDep,
    mailer: Annotated[EmailService, Depends(get_email_service)],
) -> AccountService:
    return AccountService(session, config, mailer)


CurrentUser = Annotated[User, Depends(get_current_user)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


class ResetLinkRequest(BaseModel):
    """The token/user pair carried by a password reset link."""

    token: str | None = None
    user_id: str | None = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))


async def get_reset_token_grant(link: ResetLinkRequest, accounts: AccountServiceDep) -> ResetTokenGrant:
    """Validate the token/user pair of a reset link before the handler runs."""
    return await accounts.validate_reset_token(link.token, link.user_id)


ValidResetToken = Annotated[ResetTokenGrant, Depends(get_reset_token_grant)]
