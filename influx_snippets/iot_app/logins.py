"""
Local login store

A single SQLite table holding the app's accounts and the InfluxDB read/write
tokens of each account. Passwords are stored as ``sha256$<hex digest>``.
"""
import hashlib
import hmac
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

HASH_PREFIX = "sha256$"

DEFAULT_EMAIL = "mickey@example.com"
DEFAULT_PASSWORD_HASH = "sha256$d74ff0ee8da3b9806b18c877dbf29bbde50b5bd8e4dad7a3a725000feb82e8f1"

CREATE_TABLE = """CREATE TABLE user(
    id INTEGER NOT NULL,
    email VARCHAR(100),
    password VARCHAR(100),
    name VARCHAR(1000),
    readToken VARCHAR(100),
    writeToken VARCHAR(100),
    PRIMARY KEY (id),
    UNIQUE (email))"""

DEFAULT_LOGIN_MESSAGE = """
Creating default user with login:
    Email: mickey@example.com
    Password: pass
Note that this account will not be able to access your influxdb organization."""


class LoginError(Exception):
    """Credentials did not match an account"""


class RegistrationError(Exception):
    """A new account could not be stored"""


@dataclass
class User:
    name: str
    email: str
    read_token: str
    write_token: str


def hash_password(plain_password: str) -> str:
    digest = hashlib.sha256(plain_password.encode("utf-8")).hexdigest()
    return f"{HASH_PREFIX}{digest}"


def verify_password(plain_password: str, stored: str) -> bool:
    """Compare a plaintext password with a stored ``sha256$`` hash"""
    stored_hex = stored[len(HASH_PREFIX):] if stored.startswith(HASH_PREFIX) else stored
    try:
        expected = bytes.fromhex(stored_hex)
    except ValueError:
        raise LoginError("failed to decode password hash")
    actual = hashlib.sha256(plain_password.encode("utf-8")).digest()
    return hmac.compare_digest(actual, expected)


class LoginStore:
    """Accounts in a local SQLite file, created with a default account on first use"""

    def __init__(self, path: str):
        self.path = Path(path)
        self._ensure_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.path))

    def _ensure_database(self):
        if self.path.exists():
            return

        logger.info("Failed to find logins database, creating a new one.")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as db:
            with db:
                db.execute(CREATE_TABLE)
                db.execute(
                    "INSERT INTO user VALUES(1, ?, ?, 'mickey', 'my_read_token', 'my_write_token')",
                    (DEFAULT_EMAIL, DEFAULT_PASSWORD_HASH)
                )
        logger.info(DEFAULT_LOGIN_MESSAGE)

    def check_credentials(self, email: str, plain_password: str) -> User:
        """Return the account for the email if the password matches"""
        with closing(self._connect()) as db:
            row = db.execute(
                "SELECT email, password, name, readToken, writeToken FROM user WHERE email=?",
                (email,)
            ).fetchone()

        if row is None:
            raise LoginError("failed to find any matching user account emails")

        stored_email, password, name, read_token, write_token = row
        if not verify_password(plain_password, password):
            raise LoginError("incorrect password")

        return User(name=name, email=stored_email, read_token=read_token, write_token=write_token)

    def register(self, email: str, name: str, password: str, read_token: str, write_token: str):
        if not email or not password:
            raise RegistrationError("email and password are required")

        try:
            with closing(self._connect()) as db:
                with db:
                    db.execute(
                        "INSERT INTO user (email, password, name, readToken, writeToken) VALUES (?, ?, ?, ?, ?)",
                        (email, hash_password(password), name, read_token, write_token)
                    )
        except sqlite3.IntegrityError as e:
            raise RegistrationError(f"account {email!r} could not be created: {e}")
        logger.info(f"Registered user {email}")
