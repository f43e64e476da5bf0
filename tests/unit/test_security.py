"""Unit tests for password hashing and token generation."""

from policyhub.core.security import generate_session_token, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert hashed.startswith("$argon2")

    def test_verify_correct_password(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("s3cret-pass", hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("wrong-pass", hashed) is False

    def test_verify_malformed_hash_returns_false(self):
        assert verify_password("anything", "not-a-hash") is False


class TestSessionToken:
    def test_token_is_64_hex_chars(self):
        token = generate_session_token()
        assert len(token) == 64
        int(token, 16)

    def test_tokens_are_unique(self):
        assert len({generate_session_token() for _ in range(100)}) == 100
