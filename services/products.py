"""
Product aggregate builder.

A product is created together with its variants and images in one database
transaction:

  1. validate variants, image count and name (nothing touched yet)
  2. insert the product (slug from the name, total_stock = 0)
  3. insert each variant, flush for its id, then write its SKU
  4. upload each image and insert its row (display order 1..n)
  5. write total_stock = sum of variant stock
  6. commit

Any failure rolls every row back. Assets uploaded before the failure stay in
object storage; they are logged as orphans for an external reconciliation job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from models.db_storage import DBStorage
from models.product import MAX_IMAGES, MAX_PRICE, MAX_STOCK, Product, ProductImage, ProductVariant
from services.errors import NotFound, ValidationError
from services.object_storage import ObjectStorage
from utils.slug import generate_sku, slugify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewProduct:
    name: str
    category_id: int
    brand_id: int
    description: str = ""


@dataclass(frozen=True)
class VariantSpec:
    price: Decimal
    stock: int
    size: str


@dataclass(frozen=True)
class ProductChanges:
    """
    Partial update. None, "" and 0 all mean "leave unchanged", so a field
    cannot be reset to empty/zero through this path.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    brand_id: Optional[int] = None


def calculate_total_stock(variants) -> int:
    return sum(v.stock for v in variants)


def _slug_for(name: str) -> str:
    slug = slugify(name)
    if not slug:
        raise ValidationError("name must contain at least one letter or digit")
    return slug


def _validate(variants: Sequence[VariantSpec], images: Sequence[bytes]) -> None:
    if not variants:
        raise ValidationError("at least 1 variant is required")
    for i, spec in enumerate(variants):
        if spec.price is None or not 0 <= spec.price <= MAX_PRICE:
            raise ValidationError(f"variant {i}: price must be between 0 and {MAX_PRICE}")
        if spec.stock is None or not 0 <= spec.stock <= MAX_STOCK:
            raise ValidationError(f"variant {i}: stock must be between 0 and {MAX_STOCK}")
        if not spec.size or not spec.size.strip():
            raise ValidationError(f"variant {i}: size is required")
    if not images:
        raise ValidationError("at least 1 image is required")
    if len(images) > MAX_IMAGES:
        raise ValidationError(f"maximum {MAX_IMAGES} images allowed")


class ProductService:
    def __init__(self, storage: DBStorage, object_storage: ObjectStorage, image_folder: str = "products"):
        self.storage = storage
        self.object_storage = object_storage
        self.image_folder = image_folder

    def create(
        self,
        new_product: NewProduct,
        variants: Sequence[VariantSpec],
        images: Sequence[bytes],
        category_name: str,
        brand_name: str = "",
    ) -> Product:
        """
        Create the whole aggregate or nothing.
        category_name feeds the SKU prefix; brand_name is accepted for callers
        that resolve both but is not part of the SKU.
        """
        _validate(variants, images)
        slug = _slug_for(new_product.name)

        uploaded: List[str] = []
        try:
            with self.storage.transaction() as session:
                product = Product(
                    name=new_product.name,
                    slug=slug,
                    description=new_product.description or None,
                    category_id=new_product.category_id,
                    brand_id=new_product.brand_id,
                    total_stock=0,
                )
                session.add(product)
                session.flush()

                created = []
                for spec in variants:
                    variant = ProductVariant(price=spec.price, stock=spec.stock, size=spec.size.strip())
                    product.variants.append(variant)
                    session.flush()
                    variant.sku = generate_sku(category_name, product.name, variant.id)
                    session.flush()
                    created.append(variant)

                for order, payload in enumerate(images, start=1):
                    result = self.object_storage.upload(payload, self.image_folder)
                    uploaded.append(result.external_id)
                    product.images.append(
                        ProductImage(image_url=result.url, image_public_id=result.external_id, display_order=order)
                    )
                    session.flush()

                product.total_stock = calculate_total_stock(created)
        except Exception:
            if uploaded:
                logger.warning(
                    "product %r rolled back; %d uploaded asset(s) left in object storage: %s",
                    new_product.name, len(uploaded), ", ".join(uploaded),
                )
            raise

        logger.info(
            "created product %s (%d variants, %d images)", product.id, len(product.variants), len(product.images)
        )
        return product

    def get(self, product_id: int) -> Product:
        product = self.storage.get(Product, product_id)
        if product is None:
            raise NotFound(f"product {product_id} not found")
        return product

    def list_page(self, page: int, limit: int) -> Tuple[List[Product], int]:
        query = self.storage.get_session().query(Product)
        total = query.count()
        rows = query.order_by(Product.id.asc()).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    def update(self, product_id: int, changes: ProductChanges) -> Product:
        slug = _slug_for(changes.name) if changes.name else None
        with self.storage.transaction():
            product = self.get(product_id)
            if changes.name:
                product.name = changes.name
                product.slug = slug
            if changes.description:
                product.description = changes.description
            if changes.category_id:
                product.category_id = changes.category_id
            if changes.brand_id:
                product.brand_id = changes.brand_id
        return product

    def delete(self, product_id: int) -> None:
        """
        Remove the product (variants and images cascade), then best-effort
        delete the image assets. Asset failures are logged, never raised.
        """
        with self.storage.transaction() as session:
            product = self.get(product_id)
            asset_ids = [img.image_public_id for img in product.images if img.image_public_id]
            session.delete(product)

        for external_id in asset_ids:
            try:
                self.object_storage.delete(external_id)
            except Exception:
                logger.warning("could not delete asset %s of product %s", external_id, product_id, exc_info=True)
        logger.info("deleted product %s", product_id)
