from __future__ import annotations

from flask import Blueprint, request, jsonify, abort

from api._helpers import parse_pagination, slug_from_name, slug_taken, has_products
from api.extensions import get_services
from models.category import Category
from models.product import Product
from models.schemas.category import (
    CategoryCreateSchema,
    CategoryUpdateSchema,
    CategoryOutSchema,
)
from models.user import Role
from utils.decorators import roles_required

bp = Blueprint("categories", __name__)

create_schema = CategoryCreateSchema()
update_schema = CategoryUpdateSchema()
out_schema = CategoryOutSchema()
out_list_schema = CategoryOutSchema(many=True)


def _get_or_404(session, category_id: int) -> Category:
    c = session.get(Category, category_id)
    if not c:
        abort(404, description="Category not found")
    return c


@bp.post("/categories")
@roles_required([Role.ADMIN])
def create_category():
    """
    Create a category
    ---
    tags: [Categories]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, minLength: 2, maxLength: 100 }
            description: { type: string }
    responses:
      201: { description: Created }
      409: { description: Slug already exists }
      422: { description: Validation error }
    """
    storage = get_services().storage
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})
    slug = slug_from_name(data["name"])
    if slug_taken(session, Category, slug):
        abort(409, description="Category slug already exists.")
    c = Category(name=data["name"], slug=slug, description=data["description"] or None)
    storage.new(c)
    storage.save()
    return jsonify({"data": out_schema.dump(c)}), 201


@bp.get("/categories")
@roles_required([Role.ADMIN])
def list_categories():
    """
    List categories (pagination)
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
    """
    session = get_services().storage.get_session()
    page, limit = parse_pagination()
    query = session.query(Category)
    total = query.count()
    rows = query.order_by(Category.id.asc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"page": page, "limit": limit, "total": total}})


@bp.get("/categories/<int:category_id>")
@roles_required([Role.ADMIN])
def get_category(category_id: int):
    """
    Get a category by id
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_id
        type: integer
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    session = get_services().storage.get_session()
    return jsonify({"data": out_schema.dump(_get_or_404(session, category_id))})


@bp.put("/categories/<int:category_id>")
@roles_required([Role.ADMIN])
def update_category(category_id: int):
    """
    Update a category (only non-empty fields are applied)
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, minLength: 2, maxLength: 100 }
            description: { type: string }
    responses:
      200: { description: OK }
      404: { description: Not found }
      409: { description: Slug already exists }
      422: { description: Validation error }
    """
    storage = get_services().storage
    session = storage.get_session()
    c = _get_or_404(session, category_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    if data.get("name"):
        slug = slug_from_name(data["name"])
        if slug_taken(session, Category, slug, exclude_id=c.id):
            abort(409, description="Category slug already exists.")
        c.name = data["name"]
        c.slug = slug
    if data.get("description"):
        c.description = data["description"]
    storage.new(c)
    storage.save()
    return jsonify({"data": out_schema.dump(c)})


@bp.delete("/categories/<int:category_id>")
@roles_required([Role.ADMIN])
def delete_category(category_id: int):
    """
    Delete a category
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_id
        type: integer
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
      409: { description: Products still use this category }
    """
    storage = get_services().storage
    session = storage.get_session()
    c = _get_or_404(session, category_id)
    if has_products(session, Product.category_id, c.id):
        abort(409, description="Cannot delete category: products are using it.")
    storage.delete(c)
    storage.save()
    return jsonify({"message": "Category deleted"}), 200
