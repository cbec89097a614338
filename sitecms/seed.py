import logging

import click
from flask import current_app

from . import db
from .models import Permission, Role, Setting, User
from .security import hash_password

logger = logging.getLogger(__name__)

PERMISSIONS = [
    ("users.view", "View users list and details"),
    ("users.create", "Create new users"),
    ("users.update", "Update existing users"),
    ("users.delete", "Delete users"),
    ("roles.view", "View roles list and details"),
    ("roles.create", "Create new roles"),
    ("roles.update", "Update existing roles"),
    ("roles.delete", "Delete roles"),
    ("roles.assign_permissions", "Assign permissions to roles"),
    ("permissions.view", "View permissions list and details"),
    ("permissions.create", "Create new permissions"),
    ("permissions.update", "Update existing permissions"),
    ("permissions.delete", "Delete permissions"),
    ("blogs.view", "View blog posts"),
    ("blogs.create", "Create blog posts"),
    ("blogs.update", "Update blog posts"),
    ("blogs.delete", "Delete blog posts"),
    ("portfolios.view", "View portfolios"),
    ("portfolios.create", "Create portfolios"),
    ("portfolios.update", "Update portfolios"),
    ("portfolios.delete", "Delete portfolios"),
    ("messages.view", "Read contact messages"),
    ("messages.update", "Mark contact messages read or unread"),
    ("messages.delete", "Delete contact messages"),
    ("dashboard.view", "Access dashboard and reports"),
    ("settings.view", "View system settings"),
    ("settings.update", "Update system settings"),
    ("profile.view", "View own profile"),
    ("profile.update", "Update own profile"),
]

USER_ROLE_PERMISSIONS = ("profile.view", "profile.update", "dashboard.view")

DEFAULT_SETTINGS = {
    "app_name": "StarterKits",
    "app_subtitle": "Institutional Website",
}


def split_permission_name(name):
    resource, _, action = name.partition(".")
    return resource, action or resource


def _get_or_create(model, defaults=None, **filters):
    obj = model.query.filter_by(**filters).first()
    if obj is not None:
        return obj, False
    obj = model(**filters, **(defaults or {}))
    db.session.add(obj)
    return obj, True


def seed_data():
    """Create the default permissions, roles, admin account and settings.

    Safe to run repeatedly; existing rows are left as they are except for
    the admin role, which is re-granted every permission.
    """
    for name, description in PERMISSIONS:
        resource, action = split_permission_name(name)
        _get_or_create(
            Permission,
            name=name,
            defaults={"resource": resource, "action": action, "description": description},
        )
    db.session.flush()

    admin_role, _ = _get_or_create(Role, name="admin", defaults={"description": "Administrator with full access"})
    user_role, new_user_role = _get_or_create(Role, name="user", defaults={"description": "Regular user with limited access"})

    admin_role.permissions = Permission.alive().all()
    if new_user_role:
        user_role.permissions = Permission.alive().filter(Permission.name.in_(USER_ROLE_PERMISSIONS)).all()
    db.session.flush()

    email = current_app.config["ADMIN_EMAIL"].strip().lower()
    _, created = _get_or_create(
        User,
        email=email,
        defaults={
            "username": "admin",
            "full_name": "System Administrator",
            "is_active": True,
            "role_id": admin_role.id,
            "password_hash": hash_password(current_app.config["ADMIN_PASSWORD"]),
        },
    )
    if created:
        logger.info("Default admin user created: %s", email)

    for key, value in DEFAULT_SETTINGS.items():
        _get_or_create(Setting, key=key, defaults={"value": value})

    db.session.commit()
    logger.info("Seed data ready")


def register_commands(app):
    @app.cli.command("init-db")
    @click.option("--drop", is_flag=True, help="Drop all tables before creating them.")
    def init_db_command(drop):
        """Create the schema and load seed data."""
        if drop:
            db.drop_all()
            click.echo("Dropped existing tables.")
        db.create_all()
        seed_data()
        click.echo("Database initialised.")
