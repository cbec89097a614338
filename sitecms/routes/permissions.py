from flask import Blueprint, jsonify

from .. import db
from ..errors import BadRequest
from ..models import Permission, Role, role_permissions
from ..security import permission_required
from ..seed import split_permission_name
from . import get_json, get_or_404, text_field

permissions_bp = Blueprint("permissions", __name__)


@permissions_bp.get("/permissions")
@permission_required("permissions.view")
def list_permissions():
    permissions = Permission.alive().order_by(Permission.id).all()
    return jsonify({"data": [p.to_dict() for p in permissions]})


@permissions_bp.get("/permissions/by-module")
@permission_required("permissions.view")
def permissions_by_module():
    grouped = {}
    for p in Permission.alive().order_by(Permission.resource, Permission.name):
        grouped.setdefault(p.resource, []).append(p.to_dict())
    return jsonify({"data": grouped})


@permissions_bp.get("/permissions/<int:permission_id>")
@permission_required("permissions.view")
def get_permission(permission_id):
    return jsonify({"data": get_or_404(Permission, permission_id, "Permission").to_dict()})


@permissions_bp.post("/permissions")
@permission_required("permissions.create")
def create_permission():
    data = get_json()
    name = text_field(data, "name", required=True)
    resource, action = split_permission_name(name)
    permission = Permission(
        name=name,
        resource=text_field(data, "resource") or resource,
        action=text_field(data, "action") or action,
        description=text_field(data, "description") or None,
    )
    db.session.add(permission)
    db.session.commit()
    return jsonify({"data": permission.to_dict()}), 201


@permissions_bp.put("/permissions/<int:permission_id>")
@permission_required("permissions.update")
def update_permission(permission_id):
    permission = get_or_404(Permission, permission_id, "Permission")
    data = get_json()

    for field in ("name", "resource", "action", "description"):
        value = text_field(data, field)
        if value:
            setattr(permission, field, value)

    db.session.commit()
    return jsonify({"data": permission.to_dict()})


@permissions_bp.delete("/permissions/<int:permission_id>")
@permission_required("permissions.delete")
def delete_permission(permission_id):
    permission = get_or_404(Permission, permission_id, "Permission")

    in_use = (
        db.session.query(role_permissions.c.role_id)
        .join(Role, Role.id == role_permissions.c.role_id)
        .filter(role_permissions.c.permission_id == permission.id, Role.deleted_at.is_(None))
        .first()
    )
    if in_use:
        raise BadRequest("Cannot delete permission that is assigned to roles")

    permission.soft_delete()
    db.session.commit()
    return jsonify({"message": "Permission deleted successfully"})
