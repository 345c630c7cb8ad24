"""User models."""

from pydantic import AwareDatetime, BaseModel, ConfigDict


class User(BaseModel):
    """Public view of a user; never carries the password hash."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str
    name: str
    created_at: AwareDatetime


class UserRecord(User):
    """User as stored in the credentials document."""

    password_hash: str

    def to_public(self) -> User:
        """Strip the password hash."""
        return User.model_validate(self.model_dump(exclude={"password_hash"}))
