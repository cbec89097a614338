import logging

from flask import Blueprint, g, jsonify

from ..errors import Forbidden, NotFound, Unauthorized
from ..models import User
from ..security import auth_required, create_access_token, verify_password
from . import get_json, password_field, text_field

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/login")
def login():
    data = get_json()
    email = text_field(data, "email", required=True).lower()
    password = password_field(data, required=True)

    user = User.alive().filter(User.email == email).first()
    if not user or not verify_password(user.password_hash, password):
        logger.warning("Failed login for %s", email)
        raise Unauthorized("Invalid credentials")

    if not user.is_active:
        raise Forbidden("Account is inactive")

    token = create_access_token(user)
    return jsonify({"token": token, "user": user.to_dict(with_permissions=True)}), 200


@auth_bp.get("/auth/profile")
@auth_required
def profile():
    user = User.get_alive(g.user_id)
    if not user:
        raise NotFound("User not found")
    return jsonify(user.to_dict(with_permissions=True))
