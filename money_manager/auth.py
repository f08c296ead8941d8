# money_manager/auth.py
import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import JWTManager

from . import users
from .errors import InvalidToken, Unauthorized, error_response
from .tokens import bearer_token, issue_token, verify_token

logger = logging.getLogger("money-manager")

auth_bp = Blueprint("auth", __name__)

NO_TOKEN_MSG = "No token, authorization denied"
INVALID_TOKEN_MSG = "Token is invalid or expired"


def json_body():
    """Request JSON as a dict; anything unparsable or non-object counts as empty."""
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


# ---------------- Middleware ----------------
def init_auth(app):
    """Attach JWTManager and make every rejection path a uniform 401."""
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def missing_token(reason):
        logger.info(f"Rejected request without token: {reason}")
        return error_response(NO_TOKEN_MSG, 401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        logger.info(f"Rejected invalid token: {reason}")
        return error_response(INVALID_TOKEN_MSG, 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        logger.info("Rejected expired token")
        return error_response(INVALID_TOKEN_MSG, 401)

    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_data):
        return users.get_user(jwt_data.get(app.config.get('JWT_IDENTITY_CLAIM', 'sub')))

    @jwt.user_lookup_error_loader
    def unknown_user(jwt_header, jwt_data):
        logger.info("Rejected token for a user that no longer exists")
        return error_response(INVALID_TOKEN_MSG, 401)

    return jwt


# ---------------- Routes ----------------
@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    user = users.register_user(data.get('name'), data.get('email'), data.get('password'))
    return jsonify({"success": True, "data": user.public_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    user = users.authenticate(data.get('email'), data.get('password'))
    token = issue_token(user.id)
    return jsonify({"success": True, "token": token, "user": {"name": user.name}})


@auth_bp.route('/verify-token', methods=['GET'])
def check_token():
    token = bearer_token(request.headers)
    if not token:
        raise Unauthorized(NO_TOKEN_MSG)

    user = users.get_user(verify_token(token))
    if user is None:
        raise InvalidToken(INVALID_TOKEN_MSG)
    return jsonify({"success": True, "valid": True, "user": user.public_dict()})
