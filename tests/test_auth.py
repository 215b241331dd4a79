"""
Tests for the in-process session provider.
"""

import pytest

from core.auth import LocalSessionProvider
from core.errors import AuthError, ValidationError
from core.models import EntityKind


@pytest.fixture
def provider(store):
    return LocalSessionProvider(store, salt_rounds=4)


class TestLocalSessionProvider:

    def test_sign_up_signs_in_and_creates_profile(self, provider, store):
        identity = provider.sign_up(" Ada@Example.com ", "secret-pass", "Ada Lovelace")

        assert provider.current_identity() == identity
        assert identity.email == "ada@example.com"
        profile, = store.tables[EntityKind.PROFILES]
        assert profile["id"] == identity.id
        assert profile["full_name"] == "Ada Lovelace"

    def test_sign_in_after_sign_out(self, provider):
        identity = provider.sign_up("ada@example.com", "secret-pass")
        provider.sign_out()
        assert provider.current_identity() is None

        assert provider.sign_in("ada@example.com", "secret-pass") == identity

    @pytest.mark.parametrize("email,password", [
        ("ada@example.com", "wrong-pass"),
        ("nobody@example.com", "secret-pass"),
        ("ada@example.com", "x" * 100),
    ])
    def test_bad_credentials(self, provider, email, password):
        provider.sign_up("ada@example.com", "secret-pass")
        provider.sign_out()

        with pytest.raises(AuthError):
            provider.sign_in(email, password)
        assert provider.current_identity() is None

    @pytest.mark.parametrize("email,password", [
        ("", "secret-pass"),
        ("ada@example.com", "short"),
        ("ada@example.com", "x" * 73),
    ])
    def test_sign_up_validation(self, provider, email, password):
        with pytest.raises(ValidationError):
            provider.sign_up(email, password)

    def test_duplicate_email(self, provider):
        provider.sign_up("ada@example.com", "secret-pass")
        with pytest.raises(AuthError):
            provider.sign_up("ADA@example.com", "other-pass")

    def test_listeners_notified(self, provider):
        seen = []
        unsubscribe = provider.on_change(seen.append)

        identity = provider.sign_up("ada@example.com", "secret-pass")
        provider.sign_out()
        unsubscribe()
        provider.sign_in("ada@example.com", "secret-pass")

        assert seen == [identity, None]

    def test_works_without_store(self):
        provider = LocalSessionProvider(salt_rounds=4)
        assert provider.sign_up("ada@example.com", "secret-pass").email == "ada@example.com"
