"""Tests for the local login store."""
import sqlite3

import pytest

from influx_snippets.iot_app.logins import (
    DEFAULT_PASSWORD_HASH,
    LoginError,
    LoginStore,
    RegistrationError,
    hash_password,
    verify_password,
)


@pytest.fixture
def store(tmp_path):
    return LoginStore(str(tmp_path / "logins.db"))


def test_known_password_matches_stored_hash():
    assert hash_password("pass") == DEFAULT_PASSWORD_HASH
    assert verify_password("pass", DEFAULT_PASSWORD_HASH)
    assert not verify_password("Pass", DEFAULT_PASSWORD_HASH)


def test_verify_accepts_bare_hex_digest():
    assert verify_password("pass", DEFAULT_PASSWORD_HASH[len("sha256$"):])


def test_verify_rejects_corrupt_hash():
    with pytest.raises(LoginError):
        verify_password("pass", "sha256$not-hex")


def test_default_account_created(store):
    user = store.check_credentials("mickey@example.com", "pass")

    assert user.name == "mickey"
    assert user.read_token == "my_read_token"
    assert user.write_token == "my_write_token"


def test_existing_database_is_reused(tmp_path):
    path = str(tmp_path / "logins.db")
    LoginStore(path).register("a@example.com", "A", "secret", "r", "w")

    assert LoginStore(path).check_credentials("a@example.com", "secret").name == "A"


def test_wrong_password(store):
    with pytest.raises(LoginError, match="incorrect password"):
        store.check_credentials("mickey@example.com", "wrong")


def test_unknown_email(store):
    with pytest.raises(LoginError):
        store.check_credentials("nobody@example.com", "pass")


def test_register_stores_hash_not_plaintext(store):
    store.register("minnie@example.com", "minnie", "cheese", "read", "write")

    with sqlite3.connect(str(store.path)) as db:
        (stored,) = db.execute("SELECT password FROM user WHERE email=?", ("minnie@example.com",)).fetchone()
    assert stored == hash_password("cheese")
    assert store.check_credentials("minnie@example.com", "cheese").write_token == "write"


def test_register_duplicate_email(store):
    with pytest.raises(RegistrationError):
        store.register("mickey@example.com", "other", "x", "r", "w")


def test_register_requires_email_and_password(store):
    with pytest.raises(RegistrationError):
        store.register("", "n", "x", "r", "w")
    with pytest.raises(RegistrationError):
        store.register("e@example.com", "n", "", "r", "w")
