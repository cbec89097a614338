import logging
import os
import time

from flask import current_app, request

from .errors import BadRequest

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg"})
LOGO_EXTENSIONS = IMAGE_EXTENSIONS | {".ico"}


def upload_root():
    return os.path.abspath(current_app.config["UPLOAD_FOLDER"])


def save_upload(prefix, allowed, subdir=""):
    """Store the request's ``file`` part and return its public URL.

    The extension is checked against ``allowed`` before anything touches
    the upload directory.
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")

    ext = os.path.splitext(file.filename)[1].lower()
    if ext not in allowed:
        allowed_list = ", ".join(sorted(e.lstrip(".") for e in allowed))
        raise BadRequest(f"Invalid file type. Allowed: {allowed_list}")

    target_dir = os.path.join(upload_root(), subdir) if subdir else upload_root()
    os.makedirs(target_dir, exist_ok=True)

    filename = f"{prefix}_{time.time_ns()}{ext}"
    file.save(os.path.join(target_dir, filename))
    url = "/uploads/" + (f"{subdir}/{filename}" if subdir else filename)
    logger.info("Stored upload %s", url)
    return url


def remove_upload(url):
    """Delete the file behind a /uploads/ URL, if it is still there."""
    if not url or not url.startswith("/uploads/"):
        return
    root = upload_root()
    path = os.path.abspath(os.path.join(root, url[len("/uploads/"):]))
    if not path.startswith(root + os.sep):
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
