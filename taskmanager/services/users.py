"""Credential store: user records in a single shared document."""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from taskmanager.errors import CorruptionError, DuplicateEmailError
from taskmanager.models.user import User, UserRecord
from taskmanager.services.auth import Hasher
from taskmanager.storage import DocumentStore, KeyedLocks

logger = logging.getLogger(__name__)

USERS_KEY = "users"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Lookup, registration and password checks for users."""

    def __init__(
        self,
        documents: DocumentStore,
        hasher: Hasher,
        locks: KeyedLocks | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.documents = documents
        self.hasher = hasher
        self.locks = locks or KeyedLocks()
        self.clock = clock or (lambda: datetime.now(UTC))

    def _load(self) -> list[UserRecord]:
        records = self.documents.read(USERS_KEY)
        try:
            return [UserRecord.model_validate(r) for r in records]
        except PydanticValidationError as e:
            logger.error(f"Invalid user record in {USERS_KEY}: {e}")
            raise CorruptionError("User document contains invalid records") from e

    def find_by_email(self, email: str) -> UserRecord | None:
        """Get a user, including the password hash, by email."""
        wanted = normalize_email(email)
        return next((u for u in self._load() if u.email == wanted), None)

    def find_by_id(self, user_id: str) -> User | None:
        """Get the public view of a user by id."""
        user = next((u for u in self._load() if u.id == user_id), None)
        return user.to_public() if user else None

    def create(self, email: str, password: str, name: str | None = None) -> User:
        """Register a new user.

        Raises:
            DuplicateEmailError: if the email (case-insensitive) is taken.
        """
        email = normalize_email(email)
        # Hashing stays outside the users lock
        password_hash = self.hasher.hash(password)

        with self.locks.hold(USERS_KEY):
            users = self._load()
            if any(u.email == email for u in users):
                raise DuplicateEmailError(email)

            existing_ids = {u.id for u in users}
            user_id = str(uuid.uuid4())
            while user_id in existing_ids:
                user_id = str(uuid.uuid4())

            user = UserRecord(
                id=user_id,
                email=email,
                password_hash=password_hash,
                name=name or email.split("@")[0],
                created_at=self.clock(),
            )
            users.append(user)
            self.documents.write(USERS_KEY, [u.model_dump(mode="json") for u in users])

        logger.info(f"Registered user {user.id}")
        return user.to_public()

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password."""
        user = self.find_by_email(email)
        if not user:
            return None
        if not self.hasher.verify(password, user.password_hash):
            return None
        return user.to_public()
