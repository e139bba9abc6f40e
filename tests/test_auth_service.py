from types import SimpleNamespace

import data_integrator
from services import auth_service

USERS = {
    "admin@example.com": ("secret", SimpleNamespace(id="u1", email="admin@example.com", user_metadata={"full_name": "Priya"})),
    "ops@example.com": ("hunter2", SimpleNamespace(id="u2", email="ops@example.com", user_metadata={})),
}


class FakeAuth:
    """Holds a session after sign-in, like the GoTrue client does."""

    def __init__(self, revoked):
        self.session = None
        self.revoked = revoked

    def sign_in_with_password(self, credentials):
        password, user = USERS.get(credentials["email"], (None, None))
        if user is None or password != credentials["password"]:
            raise Exception("Invalid login credentials")
        self.session = SimpleNamespace(
            user=user, access_token=f"access-{user.id}", refresh_token=f"refresh-{user.id}"
        )
        return SimpleNamespace(user=user, session=self.session)

    def set_session(self, access_token, refresh_token):
        self.session = SimpleNamespace(access_token=access_token, refresh_token=refresh_token)

    def get_user(self):
        return SimpleNamespace(user=self.session.user) if self.session else None

    def sign_out(self):
        self.revoked.append(self.session.access_token)
        self.session = None


class Clients:
    def __init__(self):
        self.revoked = []
        self.shared = SimpleNamespace(auth=FakeAuth(self.revoked))
        self.created = []

    def new(self):
        client = SimpleNamespace(auth=FakeAuth(self.revoked))
        self.created.append(client)
        return client


def install(monkeypatch):
    clients = Clients()
    monkeypatch.setattr(data_integrator, "get_client", lambda: clients.shared)
    monkeypatch.setattr(data_integrator, "new_auth_client", clients.new)
    return clients


def test_sign_in(monkeypatch):
    install(monkeypatch)
    ok, _, principal = auth_service.sign_in("admin@example.com", "secret")
    assert ok
    assert principal == auth_service.Principal("u1", "admin@example.com", "Priya")
    assert principal.access_token == "access-u1"
    assert principal.refresh_token == "refresh-u1"


def test_sign_in_failure_message_is_generic(monkeypatch):
    install(monkeypatch)
    ok, msg, principal = auth_service.sign_in("admin@example.com", "wrong")
    assert not ok
    assert msg == "Invalid email or password"
    assert principal is None


def test_sign_in_requires_both_fields(monkeypatch):
    clients = install(monkeypatch)
    ok, msg, _ = auth_service.sign_in("", "secret")
    assert not ok
    assert msg == "Email and password are required"
    assert clients.created == []


def test_sign_in_never_touches_the_shared_client(monkeypatch):
    clients = install(monkeypatch)
    auth_service.sign_in("admin@example.com", "secret")
    assert clients.shared.auth.session is None
    assert clients.shared.auth.get_user() is None


def test_two_sessions_stay_separate(monkeypatch):
    clients = install(monkeypatch)
    _, _, first = auth_service.sign_in("admin@example.com", "secret")
    _, _, second = auth_service.sign_in("ops@example.com", "hunter2")
    assert len(clients.created) == 2
    assert clients.created[0].auth.session.user.id == "u1"
    assert clients.created[1].auth.session.user.id == "u2"

    assert auth_service.sign_out(first) == (True, "Signed out")
    assert clients.revoked == ["access-u1"]
    assert clients.created[1].auth.session.user.id == "u2"


def test_sign_out_without_tokens_is_local(monkeypatch):
    clients = install(monkeypatch)
    principal = auth_service.Principal("u1", "admin@example.com")
    assert auth_service.sign_out(principal) == (True, "Signed out")
    assert clients.created == []


def test_sign_out_failure(monkeypatch):
    def broken():
        raise RuntimeError("network down")

    monkeypatch.setattr(data_integrator, "new_auth_client", broken)
    principal = auth_service.Principal("u1", "admin@example.com", access_token="a", refresh_token="r")
    assert auth_service.sign_out(principal) == (False, "Failed to logout")
