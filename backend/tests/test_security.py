"""
Murmur Backend — Password Hashing & Token Tests
=================================================

What we test:
    ✅ Stored hash is not the plaintext; only the right password verifies
    ✅ A malformed stored hash fails verification instead of raising
    ✅ Tokens decode to their subject within the validity window
    ✅ Expired, forged, and subject-less tokens are rejected distinctly
"""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from murmur.config import settings
from murmur.security import (
    TokenExpired,
    TokenInvalid,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert hashed.startswith("$2b$")

    def test_correct_password_verifies(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter23", hashed) is False
        assert verify_password("", hashed) is False

    def test_same_password_hashes_differently(self):
        """bcrypt salts every hash."""
        assert hash_password("hunter22") != hash_password("hunter22")

    def test_malformed_hash_does_not_raise(self):
        assert verify_password("hunter22", "not-a-bcrypt-hash") is False


class TestSessionTokens:

    def test_token_round_trips_subject(self):
        user_id = uuid.uuid4()
        token = create_access_token(user_id)
        assert decode_access_token(token) == user_id

    def test_token_carries_expiry_one_hour_out(self):
        token = create_access_token(uuid.uuid4())
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60

    def test_expired_token_rejected(self):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-10))
        with pytest.raises(TokenExpired):
            decode_access_token(token)

    def test_token_signed_with_other_key_rejected(self):
        forged = jwt.encode({"sub": str(uuid.uuid4())}, "another-secret", algorithm="HS256")
        with pytest.raises(TokenInvalid):
            decode_access_token(forged)

    def test_garbage_token_rejected(self):
        with pytest.raises(TokenInvalid):
            decode_access_token("definitely.not.a-jwt")

    def test_token_without_subject_rejected(self):
        token = jwt.encode({"foo": "bar"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(TokenInvalid):
            decode_access_token(token)

    def test_token_with_non_uuid_subject_rejected(self):
        token = jwt.encode({"sub": "42"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(TokenInvalid):
            decode_access_token(token)
