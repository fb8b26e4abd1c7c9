"""Request helpers shared by the admin catalog blueprints."""
from __future__ import annotations

from typing import Tuple

from flask import request, abort

from models.product import Product
from utils.slug import slugify

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def slug_taken(session, model, slug: str, exclude_id: int | None = None) -> bool:
    q = session.query(model).filter(model.slug == slug)
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    return session.query(q.exists()).scalar()


def has_products(session, column, value) -> bool:
    """True if any product references value through column (Product.category_id / Product.brand_id)."""
    return session.query(session.query(Product).filter(column == value).exists()).scalar()


def read_upload(field: str) -> bytes | None:
    """Raw bytes of an optional single-file form field."""
    f = request.files.get(field)
    if f is None or not f.filename:
        return None
    return f.read()


def slug_from_name(name: str) -> str:
    """Slug for a catalog name; 422 when nothing usable is left."""
    slug = slugify(name)
    if not slug:
        abort(422, description="name must contain at least one letter or digit")
    return slug
