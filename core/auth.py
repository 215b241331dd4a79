"""
In-process session provider.

Keeps email/password accounts in memory and tracks a single current
identity, notifying subscribers whenever it changes.
"""

import uuid
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import bcrypt

from core.errors import AuthError, ValidationError
from core.models import EntityKind, Identity
from core.ports import EntityStore

logger = logging.getLogger(__name__)

SALT_NUM_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72


@dataclass
class _Account:
    identity: Identity
    password_hash: bytes


def _create_hash(password: str, rounds: int = SALT_NUM_ROUNDS) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds))


class LocalSessionProvider:
    """Session provider with an in-memory account registry."""

    def __init__(self, store: Optional[EntityStore] = None, salt_rounds: int = SALT_NUM_ROUNDS):
        """
        Args:
            store: If given, a profile is upserted for every new account
            salt_rounds: bcrypt cost factor
        """
        self.store = store
        self.salt_rounds = salt_rounds
        self._accounts: dict[str, _Account] = {}
        self._current: Optional[Identity] = None
        self._listeners: list[Callable[[Optional[Identity]], None]] = []
        self._lock = threading.Lock()

    def current_identity(self) -> Optional[Identity]:
        return self._current

    def on_change(self, callback: Callable[[Optional[Identity]], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        for listener in list(self._listeners):
            listener(identity)

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Identity:
        """
        Register an account, create its profile and sign it in.

        Raises:
            ValidationError: if email is empty or the password length is out of range
            AuthError: if the email is already registered
        """
        email = email.strip().lower()
        if not email:
            raise ValidationError("Email is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        with self._lock:
            if email in self._accounts:
                raise AuthError("User already registered")
            identity = Identity(id=uuid.uuid4().hex, email=email)
            self._accounts[email] = _Account(identity, _create_hash(password, self.salt_rounds))

        if self.store is not None:
            self.store.upsert(
                EntityKind.PROFILES,
                {"id": identity.id, "email": email, "full_name": full_name},
                conflict_key="id",
            )

        logger.info(f"Registered account {email}")
        self._set_current(identity)
        return identity

    def sign_in(self, email: str, password: str) -> Identity:
        """
        Raises:
            AuthError: on unknown email or wrong password
        """
        account = self._accounts.get(email.strip().lower())
        encoded = password.encode("utf-8")
        if account is None or len(encoded) > MAX_PASSWORD_BYTES:
            raise AuthError("Invalid login credentials")
        if not bcrypt.checkpw(encoded, account.password_hash):
            raise AuthError("Invalid login credentials")
        self._set_current(account.identity)
        return account.identity

    def sign_out(self) -> None:
        if self._current is not None:
            logger.info(f"Signed out {self._current.email}")
        self._set_current(None)
