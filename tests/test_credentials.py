"""
Unit tests for credential persistence and token inspection.
"""

from datetime import datetime, timedelta, timezone

import jwt

from evalconsole.credentials import (
    MemoryCredentialStore,
    credential_expiry,
    init_credential_store,
    is_expired,
)
from evalconsole.models import StoredCredentials


def make_jwt(**claims):
    return jwt.encode(claims, "test-secret", algorithm="HS256")


# ── Tests: token inspection ──────────────────────────────────────────

def test_credential_expiry_reads_exp_claim():
    exp = datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert credential_expiry(make_jwt(sub="1", exp=exp)) == exp


def test_credential_expiry_opaque_token():
    assert credential_expiry("opaque-token-123") is None
    assert credential_expiry(make_jwt(sub="1")) is None


def test_is_expired():
    past = make_jwt(exp=datetime.now(timezone.utc) - timedelta(hours=1))
    future = make_jwt(exp=datetime.now(timezone.utc) + timedelta(hours=1))
    assert is_expired(past)
    assert not is_expired(future)
    assert not is_expired("opaque")


# ── Tests: stores ────────────────────────────────────────────────────

def test_memory_store_roundtrip():
    store = MemoryCredentialStore()
    assert store.load() is None
    creds = StoredCredentials(token="t", refresh_token="r", user={"id": 1})
    store.save(creds)
    assert store.load() == creds
    store.clear()
    assert store.load() is None


def test_sql_store_persists_across_instances(tmp_path):
    uri = f"sqlite:///{tmp_path / 'state.db'}"
    store = init_credential_store(uri)
    store.save(StoredCredentials(token="t1", refresh_token="r1", user={"id": 7, "email": "a@b.c"}))

    reopened = init_credential_store(uri)
    creds = reopened.load()
    assert creds.token == "t1"
    assert creds.refresh_token == "r1"
    assert creds.user == {"id": 7, "email": "a@b.c"}


def test_sql_store_save_replaces_and_clear_empties(tmp_path):
    store = init_credential_store(f"sqlite:///{tmp_path / 'state.db'}")
    store.save(StoredCredentials(token="old"))
    store.save(StoredCredentials(token="new"))
    creds = store.load()
    assert creds.token == "new"
    assert creds.user is None

    store.clear()
    assert store.load() is None
