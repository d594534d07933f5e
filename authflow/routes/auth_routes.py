import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from authflow.auth import passwords
from authflow.auth.dependencies import protect
from authflow.auth.issuer import send_token
from authflow.core.config import AuthConfig, get_config
from authflow.core.errors import AppError
from authflow.models.user import User
from authflow.services.email import EmailDeliveryError, Mailer, get_mailer
from authflow.services.user_store import UserStore, get_user_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=['auth'])

RESET_PASSWORD_PATH = '/api/v1/users/resetPassword'

# Status of successful reset and update responses.
PASSWORD_CHANGE_STATUS_CODE = status.HTTP_400_BAD_REQUEST


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    password: str | None = None
    password_confirm: str | None = Field(default=None, alias='passwordConfirm')
    password_changed_at: datetime | None = Field(default=None, alias='passwordChangedAt')


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str | None = None
    password_confirm: str | None = Field(default=None, alias='passwordConfirm')


class UpdatePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password_current: str | None = Field(default=None, alias='passwordCurrent')
    password: str | None = None
    password_confirm: str | None = Field(default=None, alias='passwordConfirm')


def build_reset_url(request: Request, reset_token: str) -> str:
    host = request.headers.get('host') or request.url.netloc
    return f'{request.url.scheme}://{host}{RESET_PASSWORD_PATH}/{reset_token}'


@router.post('/signup')
def signup(
    payload: SignupRequest,
    store: UserStore = Depends(get_user_store),
    config: AuthConfig = Depends(get_config),
) -> JSONResponse:
    new_user = store.create(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        password_confirm=payload.password_confirm,
        password_changed_at=payload.password_changed_at,
    )
    return send_token(new_user, status.HTTP_201_CREATED, config)


@router.post('/login')
def login(
    payload: LoginRequest,
    store: UserStore = Depends(get_user_store),
    config: AuthConfig = Depends(get_config),
) -> JSONResponse:
    if not payload.email or not payload.password:
        raise AppError('Please provide email and password!', status.HTTP_400_BAD_REQUEST)

    user = store.find_by_email(payload.email)
    if user is None or not user.correct_password(payload.password):
        logger.info('Rejected login attempt')
        raise AppError('Incorrect email or password', status.HTTP_401_UNAUTHORIZED)

    return send_token(user, status.HTTP_200_OK, config)


@router.post('/forgotPassword')
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    store: UserStore = Depends(get_user_store),
    mailer: Mailer = Depends(get_mailer),
    config: AuthConfig = Depends(get_config),
) -> dict:
    user = store.find_by_email(payload.email)
    if user is None:
        raise AppError('There is no user with that email address.', status.HTTP_404_NOT_FOUND)

    reset_token = user.create_password_reset_token(config.password_reset_expires_minutes)
    store.save(user, validate=False)

    reset_url = build_reset_url(request, reset_token)
    message = (
        'Forgot your password? Submit a PATCH request with your new password and '
        f'passwordConfirm to: {reset_url}.\n'
        "If you didn't forget your password, please ignore this email!"
    )
    logger.info('Issued password reset token for user id=%s', user.id)

    try:
        await mailer.send(
            user.email,
            f'Your password reset token (valid for {config.password_reset_expires_minutes} min)',
            message,
        )
    except EmailDeliveryError as exc:
        logger.warning('Password reset email failed for user id=%s', user.id, exc_info=True)
        user.clear_password_reset_token()
        store.save(user, validate=False)
        raise AppError(
            'There was an error sending the email. Try again later!',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from exc

    return {'status': 'success', 'message': 'Token sent to email!'}


@router.patch('/resetPassword/{token}')
def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    store: UserStore = Depends(get_user_store),
    config: AuthConfig = Depends(get_config),
) -> JSONResponse:
    user = store.find_by_reset_token(passwords.hash_reset_token(token))
    if user is None:
        raise AppError('Token is invalid or has expired', status.HTTP_400_BAD_REQUEST)

    user.set_password(payload.password, payload.password_confirm)
    user.clear_password_reset_token()
    store.save(user)

    return send_token(user, PASSWORD_CHANGE_STATUS_CODE, config)


@router.patch('/updateMyPassword')
def update_password(
    payload: UpdatePasswordRequest,
    current_user: User = Depends(protect),
    store: UserStore = Depends(get_user_store),
    config: AuthConfig = Depends(get_config),
) -> JSONResponse:
    user = store.find_by_id(current_user.id)
    if user is None or not user.correct_password(payload.password_current):
        raise AppError('Your current password is wrong.', status.HTTP_401_UNAUTHORIZED)

    user.set_password(payload.password, payload.password_confirm)
    store.save(user)

    return send_token(user, PASSWORD_CHANGE_STATUS_CODE, config)
