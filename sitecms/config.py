import os

DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:3001",
]


def _make_database_url(url=None) -> str:
    # Prefer DATABASE_URL (Render/Heroku style), fallback to SQLite file
    url = url or os.getenv("DATABASE_URL")
    if not url:
        return "sqlite:///local.db"
    # providers hand out postgres URLs without a driver; use psycopg3
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _split_origins(value):
    if not value:
        return list(DEFAULT_ORIGINS)
    return [o.strip() for o in value.split(",") if o.strip()]


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Process configuration, read from the environment once per app."""

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    def __init__(self, **values):
        for key, value in values.items():
            setattr(self, key, value)

    @classmethod
    def from_env(cls, overrides=None):
        overrides = dict(overrides or {})
        secret_key = os.getenv("SECRET_KEY", "dev-key")
        values = {
            "SECRET_KEY": secret_key,
            "SQLALCHEMY_DATABASE_URI": _make_database_url(),
            "JWT_SECRET": os.getenv("JWT_SECRET") or secret_key,
            "JWT_EXPIRES_HOURS": int(os.getenv("JWT_EXPIRES_HOURS", "24")),
            "PORT": int(os.getenv("PORT", "8080")),
            "ALLOWED_ORIGINS": _split_origins(os.getenv("ALLOWED_ORIGINS")),
            "UPLOAD_FOLDER": os.getenv("UPLOAD_FOLDER", "./uploads"),
            "MAX_CONTENT_LENGTH": int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024))),
            "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
            "ADMIN_EMAIL": os.getenv("ADMIN_EMAIL", "admin@example.com"),
            "ADMIN_PASSWORD": os.getenv("ADMIN_PASSWORD", "admin123"),
            "AUTO_MIGRATE": _as_bool(os.getenv("AUTO_MIGRATE", "true")),
        }
        if "DATABASE_URL" in overrides:
            values["SQLALCHEMY_DATABASE_URI"] = _make_database_url(overrides.pop("DATABASE_URL"))
        values.update(overrides)
        return cls(**values)
