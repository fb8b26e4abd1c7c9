from __future__ import annotations

import json

from flask import Blueprint, request, jsonify, abort

from api._helpers import parse_pagination
from api.extensions import get_services
from models.schemas.product import (
    ProductCreateSchema,
    ProductUpdateSchema,
    ProductOutSchema,
    VariantInputSchema,
)
from models.user import Role
from services.errors import NotFound
from utils.decorators import roles_required

bp = Blueprint("products", __name__)

# Schemas
product_create_schema = ProductCreateSchema()
product_update_schema = ProductUpdateSchema()
product_out_schema = ProductOutSchema()
products_out_schema = ProductOutSchema(many=True)
variants_in_schema = VariantInputSchema(many=True)


def _resolve_name(resolver, id_: int, field: str) -> str:
    try:
        return resolver.get_name_by_id(id_)
    except NotFound:
        abort(400, description=f"Invalid {field}")


def _parse_variants():
    raw = request.form.get("variants")
    if not raw:
        abort(422, description="variants field is required")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        abort(422, description=f"Invalid variants JSON: {exc.msg}")
    if not isinstance(parsed, list):
        abort(422, description="variants must be a JSON array")
    return variants_in_schema.load(parsed)


@bp.post("/products")
@roles_required([Role.ADMIN])
def create_product():
    """
    Create a product with its variants and images
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: name
        type: string
        required: true
      - in: formData
        name: description
        type: string
      - in: formData
        name: category_id
        type: integer
        required: true
      - in: formData
        name: brand_id
        type: integer
        required: true
      - in: formData
        name: variants
        type: string
        required: true
        description: 'JSON array, e.g. [{"price": 199000, "stock": 5, "size": "M"}]'
      - in: formData
        name: images
        type: file
        required: true
        description: "1 to 5 image files"
    responses:
      201:
        description: Created
      400:
        description: Unknown category_id or brand_id
      409:
        description: A product with the same slug already exists
      422:
        description: Validation error (fields, variants, image count)
      502:
        description: Image upload failed; nothing was saved
    """
    services = get_services()
    new_product = product_create_schema.load(request.form.to_dict())
    variants = _parse_variants()
    images = [f.read() for f in request.files.getlist("images") if f.filename]

    category_name = _resolve_name(services.category_names, new_product.category_id, "category_id")
    brand_name = _resolve_name(services.brand_names, new_product.brand_id, "brand_id")

    product = services.products.create(new_product, variants, images, category_name, brand_name)
    return jsonify({"data": product_out_schema.dump(product)}), 201


@bp.get("/products")
@roles_required([Role.ADMIN])
def list_products():
    """
    List products with variants and images
    ---
    tags:
      - Products
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
      200:
        description: List of products
    """
    products = get_services().products
    page, limit = parse_pagination()
    rows, total = products.list_page(page, limit)
    return jsonify(
        {
            "data": products_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/products/<int:product_id>")
@roles_required([Role.ADMIN])
def get_product(product_id: int):
    """
    Get a single product by id
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
    responses:
      200:
        description: Product found
      404:
        description: Not found
    """
    product = get_services().products.get(product_id)
    return jsonify({"data": product_out_schema.dump(product)})


@bp.put("/products/<int:product_id>")
@roles_required([Role.ADMIN])
def update_product(product_id: int):
    """
    Update a product (partial: empty or zero fields are left unchanged)
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
      - application/json
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            description: { type: string }
            category_id: { type: integer }
            brand_id: { type: integer }
    responses:
      200:
        description: Updated
      400:
        description: Unknown category_id or brand_id
      404:
        description: Not found
      409:
        description: Slug conflict
    """
    services = get_services()
    payload = request.form.to_dict() if request.form else (request.get_json(silent=True) or {})
    changes = product_update_schema.load(payload)
    if changes.category_id:
        _resolve_name(services.category_names, changes.category_id, "category_id")
    if changes.brand_id:
        _resolve_name(services.brand_names, changes.brand_id, "brand_id")

    product = services.products.update(product_id, changes)
    return jsonify({"data": product_out_schema.dump(product)})


@bp.delete("/products/<int:product_id>")
@roles_required([Role.ADMIN])
def delete_product(product_id: int):
    """
    Delete a product, its variants and images
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    get_services().products.delete(product_id)
    return jsonify({"message": "Product deleted"}), 200
