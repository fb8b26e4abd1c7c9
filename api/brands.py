from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort, current_app

from api._helpers import parse_pagination, slug_from_name, slug_taken, has_products, read_upload
from api.extensions import get_services
from models.brand import Brand
from models.product import Product
from models.schemas.brand import BrandCreateSchema, BrandUpdateSchema, BrandOutSchema
from models.user import Role
from utils.decorators import roles_required

bp = Blueprint("brands", __name__)

create_schema = BrandCreateSchema()
update_schema = BrandUpdateSchema()
out_schema = BrandOutSchema()
out_list_schema = BrandOutSchema(many=True)


def _payload() -> dict:
    # multipart/form-data when a logo is attached, JSON otherwise
    if request.form:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


def _get_or_404(session, brand_id: int) -> Brand:
    b = session.get(Brand, brand_id)
    if not b:
        abort(404, description="Brand not found")
    return b


def _drop_logo(public_id: str | None) -> None:
    if not public_id:
        return
    try:
        get_services().object_storage.delete(public_id)
    except Exception:
        logging.warning("Could not delete brand logo %s", public_id, exc_info=True)


@bp.post("/brands")
@roles_required([Role.ADMIN])
def create_brand():
    """
    Create a brand, optionally with a logo
    ---
    tags: [Brands]
    security:
      - Bearer: []
    consumes: [multipart/form-data, application/json]
    parameters:
      - in: formData
        name: name
        type: string
        required: true
      - in: formData
        name: description
        type: string
      - in: formData
        name: logo
        type: file
    responses:
      201: { description: Created }
      409: { description: Slug already exists }
      422: { description: Validation error }
      502: { description: Logo upload failed }
    """
    services = get_services()
    storage = services.storage
    session = storage.get_session()
    data = create_schema.load(_payload())
    slug = slug_from_name(data["name"])
    if slug_taken(session, Brand, slug):
        abort(409, description="Brand slug already exists.")

    b = Brand(name=data["name"], slug=slug, description=data["description"] or None)
    logo = read_upload("logo")
    if logo is not None:
        result = services.object_storage.upload(logo, current_app.config["BRAND_LOGO_FOLDER"])
        b.logo_url = result.url
        b.logo_public_id = result.external_id

    storage.new(b)
    storage.save()
    return jsonify({"data": out_schema.dump(b)}), 201


@bp.get("/brands")
@roles_required([Role.ADMIN])
def list_brands():
    """
    List brands (pagination)
    ---
    tags: [Brands]
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
    query = session.query(Brand)
    total = query.count()
    rows = query.order_by(Brand.id.asc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"page": page, "limit": limit, "total": total}})


@bp.get("/brands/<int:brand_id>")
@roles_required([Role.ADMIN])
def get_brand(brand_id: int):
    """
    Get a brand by id
    ---
    tags: [Brands]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: brand_id
        type: integer
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    session = get_services().storage.get_session()
    return jsonify({"data": out_schema.dump(_get_or_404(session, brand_id))})


@bp.put("/brands/<int:brand_id>")
@roles_required([Role.ADMIN])
def update_brand(brand_id: int):
    """
    Update a brand (only non-empty fields are applied; a new logo replaces the old one)
    ---
    tags: [Brands]
    security:
      - Bearer: []
    consumes: [multipart/form-data, application/json]
    parameters:
      - in: path
        name: brand_id
        type: integer
        required: true
      - in: formData
        name: name
        type: string
      - in: formData
        name: description
        type: string
      - in: formData
        name: logo
        type: file
    responses:
      200: { description: OK }
      404: { description: Not found }
      409: { description: Slug already exists }
    """
    services = get_services()
    storage = services.storage
    session = storage.get_session()
    b = _get_or_404(session, brand_id)
    data = update_schema.load(_payload())
    if data.get("name"):
        slug = slug_from_name(data["name"])
        if slug_taken(session, Brand, slug, exclude_id=b.id):
            abort(409, description="Brand slug already exists.")
        b.name = data["name"]
        b.slug = slug
    if data.get("description"):
        b.description = data["description"]

    replaced_public_id = None
    logo = read_upload("logo")
    if logo is not None:
        replaced_public_id = b.logo_public_id
        result = services.object_storage.upload(logo, current_app.config["BRAND_LOGO_FOLDER"])
        b.logo_url = result.url
        b.logo_public_id = result.external_id

    storage.new(b)
    storage.save()
    # Old logo goes only once the row points at the new one
    _drop_logo(replaced_public_id)
    return jsonify({"data": out_schema.dump(b)})


@bp.delete("/brands/<int:brand_id>")
@roles_required([Role.ADMIN])
def delete_brand(brand_id: int):
    """
    Delete a brand and its logo
    ---
    tags: [Brands]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: brand_id
        type: integer
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
      409: { description: Products still use this brand }
    """
    storage = get_services().storage
    session = storage.get_session()
    b = _get_or_404(session, brand_id)
    if has_products(session, Product.brand_id, b.id):
        abort(409, description="Cannot delete brand: products are using it.")
    public_id = b.logo_public_id
    storage.delete(b)
    storage.save()
    _drop_logo(public_id)
    return jsonify({"message": "Brand deleted"}), 200
