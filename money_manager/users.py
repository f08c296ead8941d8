# money_manager/users.py
import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .errors import Conflict, InvalidCredentials, ValidationError
from .models import PASSWORD_MIN_LENGTH, User

logger = logging.getLogger("money-manager")

# Compared against when the email is unknown, so a miss costs the same as a bad password
_DUMMY_HASH = generate_password_hash("not-a-real-password")


def normalize_email(email):
    # non-string JSON values count as missing
    if not isinstance(email, str):
        return ''
    return email.strip().lower()


def register_user(name, email, password):
    """Create a user and return it. The plaintext password is only hashed, never stored."""
    name = name.strip() if isinstance(name, str) else ''
    email = normalize_email(email)
    password = password if isinstance(password, str) else ''

    if not name:
        raise ValidationError("Please enter your name")
    if not email:
        raise ValidationError("Please enter your email")
    if not password:
        raise ValidationError("Please enter a password")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    user = User(
        id=uuid.uuid4().hex,
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    try:
        db.execute_db(
            "INSERT INTO users (id, name, email, password_hash, created_at) VALUES (?,?,?,?,?)",
            (user.id, user.name, user.email, user.password_hash, user.created_at)
        )
    except sqlite3.IntegrityError:
        # UNIQUE(email) decides races between concurrent registrations
        raise Conflict("User already exists")

    logger.info(f"Registered user {user.id}")
    return user


def find_user_by_email(email):
    row = db.query_db("SELECT * FROM users WHERE email=?", (normalize_email(email),), one=True)
    return User.from_row(row) if row else None


def get_user(user_id):
    row = db.query_db("SELECT * FROM users WHERE id=?", (user_id,), one=True)
    return User.from_row(row) if row else None


def authenticate(email, password):
    """Return the user for a matching email/password pair, else raise InvalidCredentials."""
    password = '' if password is None else str(password)
    user = find_user_by_email(email) if email else None

    if user is None:
        check_password_hash(_DUMMY_HASH, password)
        logger.warning("Login failed: unknown email")
        raise InvalidCredentials()
    if not check_password_hash(user.password_hash, password):
        logger.warning(f"Login failed: bad password for user {user.id}")
        raise InvalidCredentials()
    return user
