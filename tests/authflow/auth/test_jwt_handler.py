from datetime import timedelta

import jwt
import pytest

from authflow.auth import jwt_handler
from authflow.core.config import AuthConfig


def test_sign_token_embeds_user_id_and_expiry(config) -> None:
    token = jwt_handler.sign_token(42, config)

    payload = jwt_handler.decode_token(token, config)

    assert payload['id'] == 42
    assert payload['exp'] - payload['iat'] == int(config.jwt_expires_in.total_seconds())


def test_decode_token_rejects_other_secret(config) -> None:
    token = jwt_handler.sign_token(42, config)
    other = AuthConfig(jwt_secret_key='another-secret')

    with pytest.raises(jwt.InvalidSignatureError):
        jwt_handler.decode_token(token, other)


def test_decode_token_rejects_expired_token() -> None:
    config = AuthConfig(jwt_secret_key='test-secret', jwt_expires_in=timedelta(seconds=-1))
    token = jwt_handler.sign_token(42, config)

    with pytest.raises(jwt.ExpiredSignatureError):
        jwt_handler.decode_token(token, config)


def test_decode_token_requires_user_id_claim(config) -> None:
    token = jwt.encode({'sub': 'someone'}, config.jwt_secret_key, algorithm=config.jwt_algorithm)

    with pytest.raises(jwt.MissingRequiredClaimError):
        jwt_handler.decode_token(token, config)
