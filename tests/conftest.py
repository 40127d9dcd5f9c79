import threading

import pytest

from infrastructure.auth.gotrue_client import Subscription
from use_cases.session_models import Credentials, UserSession


class FakeAuthClient:
    """In-memory stand-in for SupabaseAuthClient."""

    def __init__(self, initial=None):
        self.initial = initial
        self.listeners = []
        self.unsubscribe_calls = 0
        self.sign_in_result = None
        self.sign_in_error = None
        self.sign_up_result = None
        self.sign_up_error = None
        self.block = None
        self.revoke_block = None
        self.session = None
        self.revoked = []
        self.signed_out = threading.Event()

    def on_auth_state_change(self, listener):
        self.listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener):
        self.unsubscribe_calls += 1
        self.listeners.remove(listener)

    def emit(self, kind, session):
        for listener in list(self.listeners):
            listener(kind, session)

    def get_session(self):
        if isinstance(self.initial, Exception):
            raise self.initial
        self.session = self.initial
        return self.initial

    def sign_in_with_password(self, email, password):
        if self.block is not None:
            self.block.wait(5)
        if self.sign_in_error is not None:
            raise self.sign_in_error
        self.session = self.sign_in_result
        self.emit("SIGNED_IN", self.session)
        return self.sign_in_result

    def sign_up(self, email, password):
        if self.block is not None:
            self.block.wait(5)
        if self.sign_up_error is not None:
            raise self.sign_up_error
        return self.sign_up_result

    def end_session(self):
        dropped, self.session = self.session, None
        self.emit("SIGNED_OUT", None)
        return dropped

    def revoke(self, session):
        if self.revoke_block is not None:
            self.revoke_block.wait(5)
        self.revoked.append(session)
        self.signed_out.set()


@pytest.fixture
def fake_auth():
    return FakeAuthClient()


@pytest.fixture
def alice():
    return UserSession(user_id="u-alice", email="alice@example.com", access_token="at-a", refresh_token="rt-a")


@pytest.fixture
def bob():
    return UserSession(user_id="u-bob", email="bob@example.com", access_token="at-b", refresh_token="rt-b")


@pytest.fixture
def credentials(alice):
    return Credentials(user_id=alice.user_id, email=alice.email, session=None)
