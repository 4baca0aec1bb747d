"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, status
from pydantic import AliasChoices, BaseModel, EmailStr, Field, StringConstraints

from reviewapp.api.deps import AccountServiceDep, CurrentUser, ResetLinkRequest, ValidResetToken
from reviewapp.models.user import UserCreated, UserRead, UserSession

router = APIRouter()

Password = Annotated[str, Field(min_length=8, max_length=20)]

# Older clients send camelCase keys
UserId = Annotated[str, Field(validation_alias=AliasChoices("user_id", "userId"))]


class CreateUserRequest(BaseModel):
    """Request body for registration."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    email: EmailStr
    password: Password


class CreateUserResponse(BaseModel):
    user: UserCreated


class VerifyEmailRequest(BaseModel):
    """Request body for email verification."""

    user_id: UserId
    otp: str = Field(validation_alias=AliasChoices("otp", "OTP"))


class ResendVerificationRequest(BaseModel):
    user_id: UserId


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(ResetLinkRequest):
    """Request body for setting a new password from a reset link."""

    new_password: Password = Field(validation_alias=AliasChoices("new_password", "newPassword"))


class SignInRequest(BaseModel):
    """Request body for sign-in."""

    email: EmailStr
    password: str = Field(min_length=1)


class SessionResponse(BaseModel):
    """Public user fields together with a bearer token."""

    user: UserSession
    message: str | None = None


class CurrentUserResponse(BaseModel):
    user: UserRead


class MessageResponse(BaseModel):
    message: str


class ResetTokenStatus(BaseModel):
    valid: bool


def session_response(user, token: str, message: str | None = None) -> SessionResponse:
    return SessionResponse(
        user=UserSession(
            id=user.id,
            name=user.name,
            email=user.email,
            is_verified=user.is_verified,
            token=token,
        ),
        message=message,
    )


@router.post("/create", response_model=CreateUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(request: CreateUserRequest, accounts: AccountServiceDep):
    """
    Register a new account.

    The account starts unverified; a verification OTP is emailed.
    """
    user = await accounts.register(request.name, request.email, request.password)
    return CreateUserResponse(user=UserCreated(id=user.id, name=user.name, email=user.email))


@router.post("/verify-email", response_model=SessionResponse, response_model_exclude_none=True)
async def verify_email(request: VerifyEmailRequest, accounts: AccountServiceDep):
    """Verify an email address with the emailed OTP and sign the user in."""
    user, token = await accounts.verify_email(request.user_id, request.otp)
    return session_response(user, token, message="Your email has been verified!")


@router.post("/resend-email-verification-token", response_model=MessageResponse)
async def resend_email_verification_token(
    request: ResendVerificationRequest,
    accounts: AccountServiceDep,
):
    """Send a new OTP once the previous one has expired."""
    await accounts.resend_verification(request.user_id)
    return MessageResponse(message="New OTP has been sent to your email account!")


@router.post("/forget-password", response_model=MessageResponse)
async def forget_password(request: ForgotPasswordRequest, accounts: AccountServiceDep):
    """Email a password reset link."""
    await accounts.forgot_password(request.email)
    return MessageResponse(message="Reset password link has been sent to your email account!")


@router.post("/verify-pass-reset-token", response_model=ResetTokenStatus)
async def verify_password_reset_token(_grant: ValidResetToken):
    """Report that a reset link is still usable.

    Invalid links are rejected by the ValidResetToken dependency.
    """
    return ResetTokenStatus(valid=True)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: ResetPasswordRequest, accounts: AccountServiceDep):
    """Set a new password using a reset link's token."""
    grant = await accounts.validate_reset_token(request.token, request.user_id)
    await accounts.reset_password(grant, request.new_password)
    return MessageResponse(message="Password has been reset successfully!")


@router.post("/sign-in", response_model=SessionResponse, response_model_exclude_none=True)
async def sign_in(request: SignInRequest, accounts: AccountServiceDep):
    """Exchange email and password for a bearer token."""
    user, token = await accounts.sign_in(request.email, request.password)
    return session_response(user, token)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(user: CurrentUser):
    """Get current authenticated user info."""
    return CurrentUserResponse(user=UserRead.model_validate(user))
