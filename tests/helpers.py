"""Helpers shared by the API tests."""


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's id and email."""

    def __init__(self, *args, user_id: str | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


def register_user(
    client, email: str, password: str = "secret1", name: str | None = None, prefix: str = "/api"
):
    """Register a user and return auth headers for it."""
    payload = {"email": email, "password": password}
    if name is not None:
        payload["name"] = name
    response = client.post(f"{prefix}/auth/register", json=payload)
    assert response.status_code == 201, response.text
    data = response.json()["data"]

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=data["user"]["email"],
    )
