from datetime import datetime

from . import db

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"
STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED)


def _iso(value):
    return value.isoformat() if value else None


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    @classmethod
    def alive(cls):
        """Query over rows that have not been soft-deleted."""
        return cls.query.filter(cls.deleted_at.is_(None))

    @classmethod
    def get_alive(cls, id):
        return cls.alive().filter(cls.id == id).first()

    def soft_delete(self):
        self.deleted_at = datetime.utcnow()

    @property
    def is_deleted(self):
        return self.deleted_at is not None


role_permissions = db.Table(
    "role_permissions",
    db.Column("role_id", db.Integer, db.ForeignKey("roles.id"), primary_key=True),
    db.Column("permission_id", db.Integer, db.ForeignKey("permissions.id"), primary_key=True),
)

blog_post_tags = db.Table(
    "blog_post_tags",
    db.Column("blog_id", db.Integer, db.ForeignKey("blogs.id"), primary_key=True),
    db.Column("blog_tag_id", db.Integer, db.ForeignKey("blog_tags.id"), primary_key=True),
)


class Permission(TimestampMixin, db.Model):
    __tablename__ = "permissions"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    resource = db.Column(db.String(100), nullable=False)
    action = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "resource": self.resource,
            "action": self.action,
            "description": self.description,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Role(TimestampMixin, db.Model):
    __tablename__ = "roles"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255), nullable=True)
    permissions = db.relationship("Permission", secondary=role_permissions, lazy="selectin")

    def active_permissions(self):
        return [p for p in self.permissions if not p.is_deleted]

    def permission_names(self):
        return {p.name for p in self.active_permissions()}

    def to_dict(self, with_permissions=True):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if with_permissions:
            data["permissions"] = [p.to_dict() for p in self.active_permissions()]
        return data


class User(TimestampMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=True)
    role = db.relationship("Role", lazy="joined")

    @property
    def live_role(self):
        if self.role is None or self.role.is_deleted:
            return None
        return self.role

    def to_dict(self, with_permissions=False):
        role = self.live_role
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "full_name": self.full_name,
            "is_active": self.is_active,
            "role_id": self.role_id,
            "role": role.to_dict(with_permissions=with_permissions) if role else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def to_author(self):
        return {"id": self.id, "username": self.username, "full_name": self.full_name}


class Setting(TimestampMixin, db.Model):
    __tablename__ = "settings"
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)


class CategoryMixin(TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class BlogCategory(CategoryMixin, db.Model):
    __tablename__ = "blog_categories"


class PortfolioCategory(CategoryMixin, db.Model):
    __tablename__ = "portfolio_categories"


class BlogTag(TimestampMixin, db.Model):
    __tablename__ = "blog_tags"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class PublishableMixin(TimestampMixin):
    """Shared columns and draft/published lifecycle of blogs and portfolios."""

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    content = db.Column(db.Text, nullable=True)
    featured_image = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), default=STATUS_DRAFT, nullable=False)
    meta_title = db.Column(db.String(255), nullable=True)
    meta_description = db.Column(db.Text, nullable=True)
    meta_keywords = db.Column(db.String(500), nullable=True)
    og_image = db.Column(db.String(500), nullable=True)
    published_at = db.Column(db.DateTime, nullable=True)

    def set_status(self, status):
        # published_at moves only on a transition into "published";
        # reverting to draft keeps the original timestamp.
        if status == STATUS_PUBLISHED and self.status != STATUS_PUBLISHED:
            self.published_at = datetime.utcnow()
        self.status = status

    def _base_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "featured_image": self.featured_image,
            "status": self.status,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "meta_keywords": self.meta_keywords,
            "og_image": self.og_image,
            "published_at": _iso(self.published_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Blog(PublishableMixin, db.Model):
    __tablename__ = "blogs"
    excerpt = db.Column(db.Text, nullable=True)
    view_count = db.Column(db.Integer, default=0, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("blog_categories.id"), nullable=True)
    author = db.relationship("User", lazy="joined")
    category = db.relationship("BlogCategory", lazy="joined")
    tags = db.relationship("BlogTag", secondary=blog_post_tags, lazy="selectin")

    def to_dict(self):
        data = self._base_dict()
        category = self.category if self.category and not self.category.is_deleted else None
        data.update({
            "excerpt": self.excerpt,
            "view_count": self.view_count,
            "author_id": self.author_id,
            "author": self.author.to_author() if self.author else None,
            "category_id": self.category_id,
            "category": category.to_dict() if category else None,
            "tags": [t.to_dict() for t in self.tags if not t.is_deleted],
        })
        return data


class Portfolio(PublishableMixin, db.Model):
    __tablename__ = "portfolios"
    description = db.Column(db.Text, nullable=True)
    images = db.Column(db.Text, nullable=True)  # JSON array of image URLs
    project_url = db.Column(db.String(500), nullable=True)
    github_url = db.Column(db.String(500), nullable=True)
    tech_stack = db.Column(db.Text, nullable=True)  # JSON array
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("portfolio_categories.id"), nullable=True)
    category = db.relationship("PortfolioCategory", lazy="joined")

    def to_dict(self):
        data = self._base_dict()
        category = self.category if self.category and not self.category.is_deleted else None
        data.update({
            "description": self.description,
            "images": self.images,
            "project_url": self.project_url,
            "github_url": self.github_url,
            "tech_stack": self.tech_stack,
            "sort_order": self.sort_order,
            "category_id": self.category_id,
            "category": category.to_dict() if category else None,
        })
        return data


class ContactMessage(TimestampMixin, db.Model):
    __tablename__ = "contact_messages"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
