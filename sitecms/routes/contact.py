from flask import Blueprint, jsonify, request

from .. import db
from ..errors import BadRequest
from ..models import ContactMessage
from ..security import permission_required
from . import checked_email, get_json, get_or_404, text_field

contact_bp = Blueprint("contact", __name__)


@contact_bp.post("/contact")
def create_message():
    data = get_json()
    message = ContactMessage(
        name=text_field(data, "name", required=True),
        email=checked_email(text_field(data, "email", required=True)),
        message=text_field(data, "message", required=True),
    )
    db.session.add(message)
    db.session.commit()
    return jsonify({"message": "Message sent successfully", "data": message.to_dict()}), 201


@contact_bp.get("/messages")
@permission_required("messages.view")
def list_messages():
    query = ContactMessage.alive().order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
    if request.args.get("unread") == "true":
        query = query.filter(ContactMessage.is_read.is_(False))
    unread_count = ContactMessage.alive().filter(ContactMessage.is_read.is_(False)).count()
    return jsonify({"data": [m.to_dict() for m in query.all()], "unread_count": unread_count})


@contact_bp.get("/messages/<int:message_id>")
@permission_required("messages.view")
def get_message(message_id):
    message = get_or_404(ContactMessage, message_id, "Message")
    # viewing a message marks it read
    if not message.is_read:
        message.is_read = True
        db.session.commit()
    return jsonify({"data": message.to_dict()})


@contact_bp.put("/messages/<int:message_id>/read")
@permission_required("messages.update")
def mark_message(message_id):
    message = get_or_404(ContactMessage, message_id, "Message")
    data = get_json()
    is_read = data.get("is_read", False)
    if not isinstance(is_read, bool):
        raise BadRequest("is_read must be a boolean")
    message.is_read = is_read
    db.session.commit()
    return jsonify({"message": "Updated", "data": message.to_dict()})


@contact_bp.delete("/messages/<int:message_id>")
@permission_required("messages.delete")
def delete_message(message_id):
    get_or_404(ContactMessage, message_id, "Message").soft_delete()
    db.session.commit()
    return jsonify({"message": "Deleted"})
