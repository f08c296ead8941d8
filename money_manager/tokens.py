# money_manager/tokens.py
"""
Token service: issues and verifies the signed session tokens handed out at login.

Tokens are HS256 JWTs created through flask_jwt_extended, so the same secret and
expiry settings apply here and in the ``@jwt_required`` routes.
"""
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from .errors import InvalidToken


def issue_token(user_id: str) -> str:
    return create_access_token(identity=str(user_id))


def verify_token(token: str) -> str:
    """Return the user id carried by ``token``.

    Raises InvalidToken when the token is malformed, has a bad signature, has
    expired, or is not an access token. The reason is deliberately not exposed.
    """
    if not token:
        raise InvalidToken()
    try:
        payload = decode_token(token)
    except (PyJWTError, JWTExtendedException, ValueError):
        raise InvalidToken()

    if payload.get('type') != 'access':
        raise InvalidToken()
    identity = payload.get(current_app.config.get('JWT_IDENTITY_CLAIM', 'sub'))
    if not identity:
        raise InvalidToken()
    return identity


def bearer_token(headers):
    """Pull the raw token out of an ``Authorization: Bearer <token>`` header."""
    auth_header = headers.get('Authorization', '')
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None
    return parts[1]
