from flask import Blueprint, jsonify

from .. import db
from ..errors import BadRequest
from ..models import Role, User
from ..security import hash_password, permission_required
from . import bool_field, checked_email, get_json, get_or_404, optional_int, password_field, text_field

users_bp = Blueprint("users", __name__)


def _role_or_400(role_id):
    if role_id is None:
        return None
    role = Role.get_alive(role_id)
    if role is None:
        raise BadRequest("Role not found")
    return role


@users_bp.get("/users")
@permission_required("users.view")
def list_users():
    users = User.alive().order_by(User.id).all()
    return jsonify({"data": [u.to_dict() for u in users]})


@users_bp.get("/users/<int:user_id>")
@permission_required("users.view")
def get_user(user_id):
    user = get_or_404(User, user_id, "User")
    return jsonify({"data": user.to_dict(with_permissions=True)})


@users_bp.post("/users")
@permission_required("users.create")
def create_user():
    data = get_json()
    email = checked_email(text_field(data, "email", required=True)).lower()
    username = text_field(data, "username", required=True)
    password = password_field(data, required=True)
    role_id = optional_int(data, "role_id")
    if role_id is None:
        raise BadRequest("role_id is required")
    _role_or_400(role_id)

    user = User(
        email=email,
        username=username,
        full_name=text_field(data, "full_name") or None,
        password_hash=hash_password(password),
        is_active=bool_field(data, "is_active", default=True),
        role_id=role_id,
    )
    db.session.add(user)
    db.session.commit()
    return jsonify({"data": user.to_dict()}), 201


@users_bp.put("/users/<int:user_id>")
@permission_required("users.update")
def update_user(user_id):
    user = get_or_404(User, user_id, "User")
    data = get_json()

    if data.get("email"):
        user.email = checked_email(text_field(data, "email")).lower()
    if data.get("username"):
        user.username = text_field(data, "username", required=True)
    if "full_name" in data:
        user.full_name = text_field(data, "full_name") or None
    if "role_id" in data:
        role_id = optional_int(data, "role_id")
        _role_or_400(role_id)
        user.role_id = role_id
    if "is_active" in data:
        user.is_active = bool_field(data, "is_active")
    password = password_field(data)
    if password:
        user.password_hash = hash_password(password)

    db.session.commit()
    return jsonify({"data": user.to_dict()})


@users_bp.delete("/users/<int:user_id>")
@permission_required("users.delete")
def delete_user(user_id):
    user = get_or_404(User, user_id, "User")
    user.soft_delete()
    db.session.commit()
    return jsonify({"message": "User deleted successfully"})
