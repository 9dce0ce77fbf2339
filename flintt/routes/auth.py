from flask import Blueprint, request, g
from datetime import datetime
import logging

from flintt.utils import (
    hash_password,
    verify_password,
    generate_token,
    success_response,
    error_response,
    validate_email,
    serialize_document,
    to_object_id
)
from flintt.utils.decorators import require_auth
from flintt.services import Database
from flintt.models import User
from flintt import limiter

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _public_user(user):
    user = dict(user)
    user.pop("password_hash", None)
    return serialize_document(user)


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("5 per hour")
def register():
    data = request.get_json() or {}

    email = data.get("email", "").strip().lower()
    password = data.get("password", "").strip()
    username = data.get("username", "").strip()
    name = data.get("name", "").strip()

    if not all([email, password, username]):
        return error_response("Missing required fields", 400)

    if not validate_email(email):
        return error_response("Invalid email format", 400)

    if len(password) < 8:
        return error_response("Password must be at least 8 characters", 400)

    if len(username) < 3:
        return error_response("Username must be at least 3 characters", 400)

    db = Database()

    if db.find_one("users", {"email": email}):
        return error_response("Email already registered", 400)

    if db.find_one("users", {"username": username}):
        return error_response("Username already taken", 400)

    user_doc = User.create_user_doc(
        email=email,
        username=username,
        password_hash=hash_password(password),
        name=name
    )
    if db.insert_one("users", user_doc) is None:
        return error_response("Could not create account", 500)

    logger.info("Registered user %s", user_doc["_id"])
    token = generate_token(str(user_doc["_id"]))
    return success_response({"user": _public_user(user_doc), "token": token}, "Registration successful", 201)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per 15 minute")
def login():
    data = request.get_json() or {}

    email = data.get("email", "").strip().lower()
    password = data.get("password", "").strip()

    if not email or not password:
        return error_response("Missing email or password", 400)

    db = Database()
    user = db.find_one("users", {"email": email})

    if not user or not verify_password(password, user.get("password_hash") or ""):
        return error_response("Invalid email or password", 401)

    db.update_one("users", {"_id": user["_id"]}, {"last_login": datetime.utcnow()})

    token = generate_token(str(user["_id"]))
    return success_response({"user": _public_user(user), "token": token}, "Login successful")


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    uid = to_object_id(g.user_id)
    if uid is None:
        return error_response("Invalid token", 401)

    db = Database()
    user = db.find_one("users", {"_id": uid})
    if not user:
        return error_response("User not found", 404)

    return success_response({"user": _public_user(user)}, "User retrieved")
