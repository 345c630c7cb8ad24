"""Tests for password hashing, tokens and the credential store."""

from datetime import timedelta

import pytest
from fakes import FakeClock, FakeHasher

from taskmanager.errors import CorruptionError, DuplicateEmailError
from taskmanager.models.user import User
from taskmanager.services.auth import (
    JoseTokenSigner,
    PasswordHasher,
    TokenClaims,
    TokenService,
)
from taskmanager.services.users import USERS_KEY, CredentialStore
from taskmanager.storage import InMemoryDocumentStore


@pytest.fixture
def tokens():
    return TokenService(JoseTokenSigner("test-secret"), expires_in=timedelta(minutes=5))


def _alter_first_char(segment: str) -> str:
    return ("B" if segment[0] == "A" else "A") + segment[1:]


class TestTokenService:
    """Tests for issuing and verifying bearer tokens."""

    def test_issued_token_verifies(self, tokens):
        token = tokens.issue("user-1", "alice@x.com")
        assert tokens.verify(token) == TokenClaims(user_id="user-1", email="alice@x.com")

    def test_expired_token_is_rejected(self):
        expired = TokenService(JoseTokenSigner("test-secret"), expires_in=timedelta(seconds=-10))
        token = expired.issue("user-1", "alice@x.com")
        assert expired.verify(token) is None

    def test_altered_signature_is_rejected(self, tokens):
        header, payload, signature = tokens.issue("user-1", "alice@x.com").split(".")
        forged = ".".join([header, payload, _alter_first_char(signature)])
        assert tokens.verify(forged) is None

    def test_altered_payload_is_rejected(self, tokens):
        header, payload, signature = tokens.issue("user-1", "alice@x.com").split(".")
        forged = ".".join([header, _alter_first_char(payload), signature])
        assert tokens.verify(forged) is None

    def test_other_secret_is_rejected(self, tokens):
        other = TokenService(JoseTokenSigner("another-secret"))
        assert tokens.verify(other.issue("user-1", "alice@x.com")) is None

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z", None])
    def test_malformed_input_never_raises(self, tokens, token):
        assert tokens.verify(token) is None

    def test_missing_claims_are_rejected(self, tokens):
        signer = JoseTokenSigner("test-secret")
        token = signer.encode({"sub": "user-1"})
        assert tokens.verify(token) is None

    def test_signer_failure_degrades_to_none(self):
        class BrokenSigner:
            def encode(self, claims):
                return "token"

            def decode(self, token):
                raise RuntimeError("boom")

        assert TokenService(BrokenSigner()).verify("token") is None


class TestPasswordHasher:
    """Tests for the bcrypt hasher."""

    def test_hash_and_verify(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("secret1")

        assert hashed != "secret1"
        assert hasher.verify("secret1", hashed) is True
        assert hasher.verify("wrong", hashed) is False

    def test_salted_per_call(self):
        hasher = PasswordHasher(rounds=4)
        assert hasher.hash("secret1") != hasher.hash("secret1")

    def test_malformed_hash_does_not_raise(self):
        assert PasswordHasher(rounds=4).verify("secret1", "not-a-hash") is False


@pytest.fixture
def documents():
    return InMemoryDocumentStore()


@pytest.fixture
def hasher():
    return FakeHasher()


@pytest.fixture
def users(documents, hasher):
    return CredentialStore(documents, hasher, clock=FakeClock())


class TestCredentialStore:
    """Tests for user registration and lookup."""

    def test_create_returns_public_view(self, users):
        user = users.create("Alice@X.com", "secret1", "Alice")

        assert type(user) is User
        assert user.email == "alice@x.com"
        assert user.name == "Alice"
        assert "password_hash" not in user.model_dump()

    def test_password_is_stored_hashed(self, users, documents, hasher):
        users.create("alice@x.com", "secret1", "Alice")

        (record,) = documents.read(USERS_KEY)
        assert record["password_hash"] == hasher.hash("secret1")
        assert "secret1" not in str(record)

    def test_name_defaults_to_email_local_part(self, users):
        assert users.create("bob@mail.com", "secret1").name == "bob"

    def test_duplicate_email_differing_in_case(self, users):
        users.create("alice@x.com", "secret1")

        with pytest.raises(DuplicateEmailError):
            users.create("ALICE@x.com", "other-pass")
        assert len(users.documents.read(USERS_KEY)) == 1

    def test_find_by_email_includes_hash(self, users):
        users.create("alice@x.com", "secret1")

        record = users.find_by_email("Alice@X.com")
        assert record is not None
        assert record.password_hash.startswith(FakeHasher.prefix)
        assert users.find_by_email("nobody@x.com") is None

    def test_find_by_id(self, users):
        created = users.create("alice@x.com", "secret1")

        assert users.find_by_id(created.id) == created
        assert users.find_by_id("unknown") is None

    def test_authenticate(self, users):
        created = users.create("alice@x.com", "secret1")

        assert users.authenticate("alice@x.com", "secret1") == created
        assert users.authenticate("ALICE@X.COM", "secret1") == created
        assert users.authenticate("alice@x.com", "wrong") is None
        assert users.authenticate("nobody@x.com", "secret1") is None

    def test_invalid_user_record_raises(self, users, documents):
        documents.write(USERS_KEY, [{"id": "x"}])

        with pytest.raises(CorruptionError):
            users.find_by_email("alice@x.com")
        with pytest.raises(CorruptionError):
            users.find_by_id("x")
        with pytest.raises(CorruptionError):
            users.create("alice@x.com", "secret1")
        assert documents.read(USERS_KEY) == [{"id": "x"}]
