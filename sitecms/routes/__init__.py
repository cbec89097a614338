from email_validator import EmailNotValidError, validate_email
from flask import request

from ..errors import BadRequest, NotFound
from ..models import STATUS_DRAFT, STATUSES


def get_json():
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest("JSON object expected")
    return data


def text_field(data, name, required=False):
    value = data.get(name)
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise BadRequest(f"{name} must be a string")
    value = value.strip()
    if required and not value:
        raise BadRequest(f"{name} is required")
    return value


def password_field(data, required=False):
    value = data.get("password")
    if value is None or value == "":
        if required:
            raise BadRequest("password is required")
        return None
    if not isinstance(value, str):
        raise BadRequest("password must be a string")
    return value


def bool_field(data, name, default=None):
    value = data.get(name, default)
    if not isinstance(value, bool):
        raise BadRequest(f"{name} must be a boolean")
    return value


def optional_int(data, name):
    value = data.get(name)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise BadRequest(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must be an integer")


def id_list(data, name):
    """Return a list of ints, or None when the field is absent."""
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, list):
        raise BadRequest(f"{name} must be a list")
    try:
        return [int(v) for v in value]
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must contain integers")


def query_int(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"{name} must be an integer")


def checked_email(value):
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise BadRequest(str(e))


PUBLISHABLE_TEXT_FIELDS = ("content", "featured_image", "meta_title", "meta_description", "meta_keywords", "og_image")


def apply_publishable(obj, data):
    """Overwrite the fields blogs and portfolios share from a request body."""
    obj.title = text_field(data, "title", required=True)
    obj.slug = text_field(data, "slug", required=True)
    for field in PUBLISHABLE_TEXT_FIELDS:
        setattr(obj, field, text_field(data, field) or None)

    status = text_field(data, "status") or STATUS_DRAFT
    if status not in STATUSES:
        raise BadRequest(f"status must be one of: {', '.join(STATUSES)}")
    obj.set_status(status)


def page_args(default_limit=10, max_limit=50):
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", default_limit, type=int)
    if page < 1:
        page = 1
    if limit < 1 or limit > max_limit:
        limit = default_limit
    return page, limit


def get_or_404(model, id, label):
    obj = model.get_alive(id)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def register_blueprints(app):
    from .auth import auth_bp
    from .blogs import blogs_bp
    from .contact import contact_bp
    from .permissions import permissions_bp
    from .portfolios import portfolios_bp
    from .roles import roles_bp
    from .settings import settings_bp
    from .users import users_bp

    for bp in (auth_bp, users_bp, roles_bp, permissions_bp, blogs_bp, portfolios_bp, settings_bp, contact_bp):
        app.register_blueprint(bp, url_prefix="/api")
