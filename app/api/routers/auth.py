from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_authenticated_identity,
    get_complete_password_reset_use_case,
    get_initiate_password_reset_use_case,
    get_login_google_use_case,
    get_login_local_use_case,
    get_logout_session_use_case,
    get_optional_identity,
    get_refresh_session_use_case,
    get_register_user_use_case,
    get_verify_email_use_case,
)
from app.api.schemas.auth import (
    AuthenticatedIdentityData,
    AuthTokenData,
    AuthUserResponse,
    GoogleLoginRequest,
    LoginRequest,
    LogoutRequest,
    MessageData,
    PasswordResetCompleteRequest,
    PasswordResetInitiateRequest,
    RefreshTokenData,
    RefreshTokenRequest,
    RegisterData,
    RegisterRequest,
    SuccessResponse,
    VerifyEmailData,
)
from app.application.dto.auth import (
    AuthTokensOutput,
    CompletePasswordResetInput,
    InitiatePasswordResetInput,
    LoginGoogleInput,
    LoginLocalInput,
    LogoutInput,
    RefreshSessionInput,
    RegisterUserInput,
    VerifyEmailInput,
)
from app.application.use_cases.complete_password_reset import CompletePasswordResetUseCase
from app.application.use_cases.initiate_password_reset import InitiatePasswordResetUseCase
from app.application.use_cases.login_google import LoginGoogleUseCase
from app.application.use_cases.login_local import LoginLocalUseCase
from app.application.use_cases.logout_session import LogoutSessionUseCase
from app.application.use_cases.refresh_session import RefreshSessionUseCase
from app.application.use_cases.register_user import RegisterUserUseCase
from app.application.use_cases.verify_email import VerifyEmailUseCase
from app.domain.entities.identity import AuthenticatedIdentity


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth")


def _token_data(output: AuthTokensOutput) -> AuthTokenData:
    return AuthTokenData(
        access_token=output.access_token,
        refresh_token=output.refresh_token,
        user=AuthUserResponse(
            user_id=output.user.user_id,
            email=output.user.email,
            email_verified=output.user.email_verified,
        ),
    )


@router.post("/register", response_model=SuccessResponse[RegisterData], status_code=201)
def register_user(
    req: RegisterRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    output = use_case.execute(RegisterUserInput(email=req.email, password=req.password))
    return SuccessResponse[RegisterData](
        data=RegisterData(
            user_id=output.user.user_id,
            email=output.user.email,
            email_verified=output.user.email_verified,
            message=output.message,
        )
    )


@router.post("/login", response_model=SuccessResponse[AuthTokenData])
def login_local(
    req: LoginRequest,
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    return SuccessResponse[AuthTokenData](data=_token_data(output))


@router.post("/login/google", response_model=SuccessResponse[AuthTokenData])
def login_google(
    req: GoogleLoginRequest,
    use_case: LoginGoogleUseCase = Depends(get_login_google_use_case),
):
    output = use_case.execute(LoginGoogleInput(id_token=req.id_token))
    return SuccessResponse[AuthTokenData](data=_token_data(output))


@router.get("/verify-email", response_model=SuccessResponse[VerifyEmailData])
def verify_email(
    token: str | None = None,
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
):
    output = use_case.execute(VerifyEmailInput(token=token))
    return SuccessResponse[VerifyEmailData](data=VerifyEmailData(message=output.message, email=output.email))


@router.post("/refresh-token", response_model=SuccessResponse[RefreshTokenData])
def refresh_token(
    req: RefreshTokenRequest,
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    output = use_case.execute(RefreshSessionInput(refresh_token=req.refresh_token))
    return SuccessResponse[RefreshTokenData](
        data=RefreshTokenData(access_token=output.access_token, refresh_token=output.refresh_token)
    )


@router.post("/password-reset/initiate", response_model=SuccessResponse[MessageData])
def initiate_password_reset(
    req: PasswordResetInitiateRequest,
    use_case: InitiatePasswordResetUseCase = Depends(get_initiate_password_reset_use_case),
):
    output = use_case.execute(InitiatePasswordResetInput(email=req.email))
    return SuccessResponse[MessageData](data=MessageData(message=output.message))


@router.post("/password-reset/complete", response_model=SuccessResponse[MessageData])
def complete_password_reset(
    req: PasswordResetCompleteRequest,
    use_case: CompletePasswordResetUseCase = Depends(get_complete_password_reset_use_case),
):
    output = use_case.execute(CompletePasswordResetInput(token=req.token, new_password=req.new_password))
    return SuccessResponse[MessageData](data=MessageData(message=output.message))


@router.post("/logout", response_model=SuccessResponse[MessageData])
def logout(
    req: LogoutRequest | None = None,
    identity: AuthenticatedIdentity | None = Depends(get_optional_identity),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    output = use_case.execute(LogoutInput(refresh_token=req.refresh_token if req else None))
    if identity is not None:
        logger.info("auth: logout user_id=%s", identity.user_id)
    return SuccessResponse[MessageData](data=MessageData(message=output.message))


@router.get("/me", response_model=SuccessResponse[AuthenticatedIdentityData])
def get_me(identity: AuthenticatedIdentity = Depends(get_authenticated_identity)):
    return SuccessResponse[AuthenticatedIdentityData](
        data=AuthenticatedIdentityData(user_id=identity.user_id, email=identity.email)
    )
