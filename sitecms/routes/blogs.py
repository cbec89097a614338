from flask import Blueprint, g, jsonify, request
from sqlalchemy import or_

from .. import db
from ..errors import NotFound
from ..models import STATUS_PUBLISHED, Blog, BlogCategory, BlogTag, blog_post_tags
from ..security import permission_required
from ..uploads import IMAGE_EXTENSIONS, save_upload
from . import apply_publishable, get_json, get_or_404, id_list, optional_int, page_args, query_int, text_field

blogs_bp = Blueprint("blogs", __name__)


def _search_filter(query, search):
    pattern = f"%{search}%"
    return query.filter(or_(Blog.title.ilike(pattern), Blog.excerpt.ilike(pattern)))


def _tags_by_id(ids):
    if not ids:
        return []
    return BlogTag.alive().filter(BlogTag.id.in_(ids)).all()


# ============ BLOG CATEGORIES ============

def _categories_response():
    categories = BlogCategory.alive().order_by(BlogCategory.id).all()
    return jsonify({"data": [c.to_dict() for c in categories]})


@blogs_bp.get("/blog-categories")
@permission_required("blogs.view")
def list_categories():
    return _categories_response()


@blogs_bp.get("/public/blog-categories")
def public_categories():
    return _categories_response()


@blogs_bp.get("/blog-categories/<int:category_id>")
@permission_required("blogs.view")
def get_category(category_id):
    return jsonify({"data": get_or_404(BlogCategory, category_id, "Category").to_dict()})


@blogs_bp.post("/blog-categories")
@permission_required("blogs.create")
def create_category():
    data = get_json()
    category = BlogCategory(
        name=text_field(data, "name", required=True),
        slug=text_field(data, "slug", required=True),
        description=text_field(data, "description") or None,
    )
    db.session.add(category)
    db.session.commit()
    return jsonify({"data": category.to_dict()}), 201


@blogs_bp.put("/blog-categories/<int:category_id>")
@permission_required("blogs.update")
def update_category(category_id):
    category = get_or_404(BlogCategory, category_id, "Category")
    data = get_json()
    category.name = text_field(data, "name") or category.name
    category.slug = text_field(data, "slug") or category.slug
    category.description = text_field(data, "description") or None
    db.session.commit()
    return jsonify({"data": category.to_dict()})


@blogs_bp.delete("/blog-categories/<int:category_id>")
@permission_required("blogs.delete")
def delete_category(category_id):
    get_or_404(BlogCategory, category_id, "Category").soft_delete()
    db.session.commit()
    return jsonify({"message": "Category deleted successfully"})


# ============ BLOG TAGS ============

def _tags_response():
    tags = BlogTag.alive().order_by(BlogTag.id).all()
    return jsonify({"data": [t.to_dict() for t in tags]})


@blogs_bp.get("/blog-tags")
@permission_required("blogs.view")
def list_tags():
    return _tags_response()


@blogs_bp.get("/public/blog-tags")
def public_tags():
    return _tags_response()


@blogs_bp.post("/blog-tags")
@permission_required("blogs.create")
def create_tag():
    data = get_json()
    tag = BlogTag(name=text_field(data, "name", required=True), slug=text_field(data, "slug", required=True))
    db.session.add(tag)
    db.session.commit()
    return jsonify({"data": tag.to_dict()}), 201


@blogs_bp.delete("/blog-tags/<int:tag_id>")
@permission_required("blogs.delete")
def delete_tag(tag_id):
    get_or_404(BlogTag, tag_id, "Tag").soft_delete()
    db.session.commit()
    return jsonify({"message": "Tag deleted successfully"})


# ============ BLOG POSTS ============

@blogs_bp.get("/blogs")
@permission_required("blogs.view")
def list_blogs():
    query = Blog.alive().order_by(Blog.created_at.desc(), Blog.id.desc())

    status = request.args.get("status")
    if status:
        query = query.filter(Blog.status == status)

    category_id = query_int("category_id")
    if category_id is not None:
        query = query.filter(Blog.category_id == category_id)

    search = request.args.get("search")
    if search:
        query = _search_filter(query, search)

    return jsonify({"data": [b.to_dict() for b in query.all()]})


@blogs_bp.get("/blogs/<int:blog_id>")
@permission_required("blogs.view")
def get_blog(blog_id):
    return jsonify({"data": get_or_404(Blog, blog_id, "Blog").to_dict()})


@blogs_bp.post("/blogs")
@permission_required("blogs.create")
def create_blog():
    data = get_json()
    blog = Blog(author_id=g.user_id, view_count=0)
    apply_publishable(blog, data)
    blog.excerpt = text_field(data, "excerpt") or None
    blog.category_id = optional_int(data, "category_id")
    blog.tags = _tags_by_id(id_list(data, "tag_ids"))

    db.session.add(blog)
    db.session.commit()
    return jsonify({"data": blog.to_dict()}), 201


@blogs_bp.put("/blogs/<int:blog_id>")
@permission_required("blogs.update")
def update_blog(blog_id):
    blog = get_or_404(Blog, blog_id, "Blog")
    data = get_json()

    apply_publishable(blog, data)
    blog.excerpt = text_field(data, "excerpt") or None
    blog.category_id = optional_int(data, "category_id")

    tag_ids = id_list(data, "tag_ids")
    if tag_ids is not None:
        blog.tags = _tags_by_id(tag_ids)

    db.session.commit()
    return jsonify({"data": blog.to_dict()})


@blogs_bp.delete("/blogs/<int:blog_id>")
@permission_required("blogs.delete")
def delete_blog(blog_id):
    get_or_404(Blog, blog_id, "Blog").soft_delete()
    db.session.commit()
    return jsonify({"message": "Blog deleted successfully"})


@blogs_bp.post("/blogs/upload")
@permission_required("blogs.create")
def upload_blog_image():
    url = save_upload("blog", IMAGE_EXTENSIONS, subdir="blog")
    return jsonify({"url": url})


# ============ PUBLIC ============

@blogs_bp.get("/public/blogs")
def published_blogs():
    query = Blog.alive().filter(Blog.status == STATUS_PUBLISHED)

    category_slug = request.args.get("category")
    if category_slug:
        category = BlogCategory.alive().filter_by(slug=category_slug).first()
        if category:
            query = query.filter(Blog.category_id == category.id)

    tag_slug = request.args.get("tag")
    if tag_slug:
        tag = BlogTag.alive().filter_by(slug=tag_slug).first()
        if tag:
            query = query.join(blog_post_tags, blog_post_tags.c.blog_id == Blog.id).filter(
                blog_post_tags.c.blog_tag_id == tag.id
            )

    search = request.args.get("search")
    if search:
        query = _search_filter(query, search)

    total = query.count()
    page, limit = page_args()
    blogs = (
        query.order_by(Blog.published_at.desc(), Blog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify({"data": [b.to_dict() for b in blogs], "total": total, "page": page, "limit": limit})


@blogs_bp.get("/public/blogs/<slug>")
def published_blog(slug):
    blog = Blog.alive().filter(Blog.slug == slug, Blog.status == STATUS_PUBLISHED).first()
    if not blog:
        raise NotFound("Blog not found")

    # viewing must not bump updated_at
    Blog.query.filter(Blog.id == blog.id).update(
        {Blog.view_count: Blog.view_count + 1, Blog.updated_at: Blog.updated_at},
        synchronize_session=False,
    )
    db.session.commit()
    return jsonify({"data": blog.to_dict()})
