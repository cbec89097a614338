from flask import Blueprint, jsonify

from .. import db
from ..models import Permission, Role
from ..security import permission_required
from . import get_json, get_or_404, id_list, text_field

roles_bp = Blueprint("roles", __name__)


def _permissions_by_id(ids):
    if not ids:
        return []
    return Permission.alive().filter(Permission.id.in_(ids)).all()


@roles_bp.get("/roles")
@permission_required("roles.view")
def list_roles():
    roles = Role.alive().order_by(Role.id).all()
    return jsonify({"data": [r.to_dict() for r in roles]})


@roles_bp.get("/roles/<int:role_id>")
@permission_required("roles.view")
def get_role(role_id):
    return jsonify({"data": get_or_404(Role, role_id, "Role").to_dict()})


@roles_bp.post("/roles")
@permission_required("roles.create")
def create_role():
    data = get_json()
    role = Role(
        name=text_field(data, "name", required=True),
        description=text_field(data, "description") or None,
    )
    role.permissions = _permissions_by_id(id_list(data, "permission_ids"))
    db.session.add(role)
    db.session.commit()
    return jsonify({"data": role.to_dict()}), 201


@roles_bp.put("/roles/<int:role_id>")
@permission_required("roles.update")
def update_role(role_id):
    role = get_or_404(Role, role_id, "Role")
    data = get_json()

    role.name = text_field(data, "name", required=True)
    role.description = text_field(data, "description") or None

    # an empty or missing list leaves the current assignment alone
    permission_ids = id_list(data, "permission_ids")
    if permission_ids:
        role.permissions = _permissions_by_id(permission_ids)

    db.session.commit()
    return jsonify({"data": role.to_dict()})


@roles_bp.delete("/roles/<int:role_id>")
@permission_required("roles.delete")
def delete_role(role_id):
    role = get_or_404(Role, role_id, "Role")
    role.soft_delete()
    db.session.commit()
    return jsonify({"message": "Role deleted successfully"})
