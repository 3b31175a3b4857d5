from datetime import datetime, timedelta, timezone

import jwt
import pytest

from backend.app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_verifies_only_the_original():
    hashed = get_password_hash("tutorlink-pass")
    assert hashed != "tutorlink-pass"
    assert verify_password("tutorlink-pass", hashed)
    assert not verify_password("other-pass", hashed)


def test_token_subject_is_stringified_user_id():
    payload = decode_access_token(create_access_token(user_id=42))
    assert payload["sub"] == "42"
    assert "exp" in payload


def test_token_accepts_claims_dict():
    assert decode_access_token(create_access_token({"sub": 7}))["sub"] == "7"


def test_expired_token_rejected():
    with pytest.raises(ValueError):
        decode_access_token(create_access_token(user_id=1, expires_minutes=-1))


def test_token_signed_with_other_key_rejected():
    forged = jwt.encode(
        {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "not-the-server-key",
        algorithm="HS256",
    )
    with pytest.raises(ValueError):
        decode_access_token(forged)
