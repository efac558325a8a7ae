import time
from datetime import timedelta

import pytest
from jose import jwt

from formcraft.config.settings import settings
from formcraft.utils.auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    require_owner,
    verify_password,
)
from formcraft.utils.errors import AuthError, OwnershipError


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("hunter2")
    second = hash_password("hunter2")
    assert first != second
    assert verify_password("hunter2", first)
    assert not verify_password("hunter3", first)


def test_verify_password_rejects_garbage_digest():
    assert verify_password("hunter2", "not-a-bcrypt-hash") is False


def test_token_round_trip():
    token = create_access_token("user_1")
    assert decode_access_token(token) == "user_1"


def test_token_expires_after_a_day_by_default():
    claims = jwt.decode(create_access_token("user_1"), settings.SIGNING_SECRET, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == "user_1"
    assert 23 * 3600 < claims["exp"] - time.time() <= 24 * 3600


def test_expired_token_is_rejected():
    token = create_access_token("user_1", expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthError):
        decode_access_token(token)


def test_token_signed_with_another_secret_is_rejected():
    token = jwt.encode({"sub": "user_1"}, "someone-else", algorithm="HS256")
    with pytest.raises(AuthError):
        decode_access_token(token)


def test_require_owner():
    form = {"_id": "form_1", "userId": "user_1"}
    assert require_owner(form, "user_1") is form
    with pytest.raises(OwnershipError):
        require_owner(form, "user_2")
