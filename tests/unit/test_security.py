import uuid
from datetime import timedelta

from jose import jwt

from realty_crm.lib.config import settings
from realty_crm.lib.security import create_access_token, decode_access_token


def test_token_round_trip_keeps_subject_and_email():
    user_id = uuid.uuid4()

    payload = decode_access_token(create_access_token(user_id, email="dana@example.com"))

    assert payload["sub"] == str(user_id)
    assert payload["email"] == "dana@example.com"


def test_expired_token_is_rejected():
    token = create_access_token(uuid.uuid4(), expires_delta=timedelta(minutes=-5))

    assert decode_access_token(token) is None


def test_wrong_secret_is_rejected():
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "aud": settings.auth_jwt_audience},
        "someone-elses-secret",
        algorithm=settings.auth_jwt_algorithm,
    )

    assert decode_access_token(token) is None


def test_wrong_audience_is_rejected():
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "aud": "service_role"},
        settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm,
    )

    assert decode_access_token(token) is None


def test_token_without_subject_is_rejected():
    token = jwt.encode(
        {"aud": settings.auth_jwt_audience},
        settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm,
    )

    assert decode_access_token(token) is None


def test_garbage_is_rejected():
    assert decode_access_token("not-a-jwt") is None
