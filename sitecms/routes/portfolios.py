from flask import Blueprint, jsonify, request
from sqlalchemy import or_

from .. import db
from ..errors import NotFound
from ..models import STATUS_PUBLISHED, Portfolio, PortfolioCategory
from ..security import permission_required
from ..uploads import IMAGE_EXTENSIONS, save_upload
from . import apply_publishable, get_json, get_or_404, optional_int, query_int, text_field

portfolios_bp = Blueprint("portfolios", __name__)

PORTFOLIO_TEXT_FIELDS = ("description", "images", "project_url", "github_url", "tech_stack")


def _ordered(query):
    return query.order_by(Portfolio.sort_order.asc(), Portfolio.created_at.desc(), Portfolio.id.desc())


def _apply(portfolio, data):
    apply_publishable(portfolio, data)
    for field in PORTFOLIO_TEXT_FIELDS:
        setattr(portfolio, field, text_field(data, field) or None)
    portfolio.category_id = optional_int(data, "category_id")
    portfolio.sort_order = optional_int(data, "sort_order") or 0


# ============ PORTFOLIO CATEGORIES ============

def _categories_response():
    categories = PortfolioCategory.alive().order_by(PortfolioCategory.id).all()
    return jsonify({"data": [c.to_dict() for c in categories]})


@portfolios_bp.get("/portfolio-categories")
@permission_required("portfolios.view")
def list_categories():
    return _categories_response()


@portfolios_bp.get("/public/portfolio-categories")
def public_categories():
    return _categories_response()


@portfolios_bp.get("/portfolio-categories/<int:category_id>")
@permission_required("portfolios.view")
def get_category(category_id):
    return jsonify({"data": get_or_404(PortfolioCategory, category_id, "Category").to_dict()})


@portfolios_bp.post("/portfolio-categories")
@permission_required("portfolios.create")
def create_category():
    data = get_json()
    category = PortfolioCategory(
        name=text_field(data, "name", required=True),
        slug=text_field(data, "slug", required=True),
        description=text_field(data, "description") or None,
    )
    db.session.add(category)
    db.session.commit()
    return jsonify({"data": category.to_dict()}), 201


@portfolios_bp.put("/portfolio-categories/<int:category_id>")
@permission_required("portfolios.update")
def update_category(category_id):
    category = get_or_404(PortfolioCategory, category_id, "Category")
    data = get_json()
    category.name = text_field(data, "name") or category.name
    category.slug = text_field(data, "slug") or category.slug
    category.description = text_field(data, "description") or None
    db.session.commit()
    return jsonify({"data": category.to_dict()})


@portfolios_bp.delete("/portfolio-categories/<int:category_id>")
@permission_required("portfolios.delete")
def delete_category(category_id):
    get_or_404(PortfolioCategory, category_id, "Category").soft_delete()
    db.session.commit()
    return jsonify({"message": "Category deleted successfully"})


# ============ PORTFOLIOS ============

@portfolios_bp.get("/portfolios")
@permission_required("portfolios.view")
def list_portfolios():
    query = Portfolio.alive()

    status = request.args.get("status")
    if status:
        query = query.filter(Portfolio.status == status)

    category_id = query_int("category_id")
    if category_id is not None:
        query = query.filter(Portfolio.category_id == category_id)

    search = request.args.get("search")
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Portfolio.title.ilike(pattern), Portfolio.description.ilike(pattern)))

    return jsonify({"data": [p.to_dict() for p in _ordered(query).all()]})


@portfolios_bp.get("/portfolios/<int:portfolio_id>")
@permission_required("portfolios.view")
def get_portfolio(portfolio_id):
    return jsonify({"data": get_or_404(Portfolio, portfolio_id, "Portfolio").to_dict()})


@portfolios_bp.post("/portfolios")
@permission_required("portfolios.create")
def create_portfolio():
    portfolio = Portfolio()
    _apply(portfolio, get_json())
    db.session.add(portfolio)
    db.session.commit()
    return jsonify({"data": portfolio.to_dict()}), 201


@portfolios_bp.put("/portfolios/<int:portfolio_id>")
@permission_required("portfolios.update")
def update_portfolio(portfolio_id):
    portfolio = get_or_404(Portfolio, portfolio_id, "Portfolio")
    _apply(portfolio, get_json())
    db.session.commit()
    return jsonify({"data": portfolio.to_dict()})


@portfolios_bp.delete("/portfolios/<int:portfolio_id>")
@permission_required("portfolios.delete")
def delete_portfolio(portfolio_id):
    get_or_404(Portfolio, portfolio_id, "Portfolio").soft_delete()
    db.session.commit()
    return jsonify({"message": "Portfolio deleted successfully"})


@portfolios_bp.post("/portfolios/upload")
@permission_required("portfolios.create")
def upload_portfolio_image():
    url = save_upload("portfolio", IMAGE_EXTENSIONS, subdir="portfolio")
    return jsonify({"url": url})


# ============ PUBLIC ============

@portfolios_bp.get("/public/portfolios")
def published_portfolios():
    query = Portfolio.alive().filter(Portfolio.status == STATUS_PUBLISHED)

    category_slug = request.args.get("category")
    if category_slug:
        category = PortfolioCategory.alive().filter_by(slug=category_slug).first()
        if category:
            query = query.filter(Portfolio.category_id == category.id)

    return jsonify({"data": [p.to_dict() for p in _ordered(query).all()]})


@portfolios_bp.get("/public/portfolios/<slug>")
def published_portfolio(slug):
    portfolio = Portfolio.alive().filter(Portfolio.slug == slug, Portfolio.status == STATUS_PUBLISHED).first()
    if not portfolio:
        raise NotFound("Portfolio not found")
    return jsonify({"data": portfolio.to_dict()})
