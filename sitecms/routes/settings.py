from flask import Blueprint, jsonify, request

from .. import db
from ..errors import BadRequest
from ..models import Setting
from ..security import permission_required
from ..uploads import LOGO_EXTENSIONS, remove_upload, save_upload

settings_bp = Blueprint("settings", __name__)

UPLOAD_TYPES = ("logo", "favicon")


def upsert_setting(key, value):
    """Create ``key`` or overwrite only its value; returns the previous value."""
    setting = Setting.query.filter_by(key=key).first()
    if setting is None:
        db.session.add(Setting(key=key, value=value))
        return None
    previous = None if setting.is_deleted else setting.value
    setting.value = value
    setting.deleted_at = None
    return previous


@settings_bp.get("/settings")
def get_settings():
    settings = Setting.alive().order_by(Setting.key).all()
    return jsonify({"data": {s.key: s.value for s in settings}})


@settings_bp.put("/settings")
@permission_required("settings.update")
def update_settings():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise BadRequest("JSON object of key/value pairs expected")
    for key, value in data.items():
        if not isinstance(value, str):
            raise BadRequest(f"Value for {key} must be a string")

    for key, value in data.items():
        upsert_setting(key, value)
    db.session.commit()
    return jsonify({"message": "Settings updated successfully"})


@settings_bp.post("/settings/upload")
@permission_required("settings.update")
def upload_logo():
    upload_type = request.form.get("type")
    if upload_type not in UPLOAD_TYPES:
        upload_type = "logo"

    url = save_upload(upload_type, LOGO_EXTENSIONS)
    previous = upsert_setting(f"app_{upload_type}", url)
    db.session.commit()
    if previous and previous != url:
        remove_upload(previous)

    return jsonify({"message": "File uploaded successfully", "url": url})
