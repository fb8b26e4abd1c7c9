from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    Float,
    Text,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, IntegerPrimaryKeyMixin

MAX_IMAGES = 5
# Column limits: Numeric(10, 2) price, 32-bit stock
MAX_PRICE = Decimal("99999999.99")
MAX_STOCK = 2**31 - 1


class Product(IntegerPrimaryKeyMixin, BaseModel, Base):
    __tablename__ = "products"

    name = Column(Text, nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    # Category/Brand: RESTRICT deletion while products reference them
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="RESTRICT"), nullable=False, index=True)

    total_stock = Column(Integer, nullable=False, default=0)  # sum of variant stock
    rating_avg = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductVariant.id",
    )
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductImage.display_order",
    )

    __table_args__ = (
        CheckConstraint("total_stock >= 0", name="ck_products_total_stock_nonnegative"),
    )


class ProductVariant(IntegerPrimaryKeyMixin, BaseModel, Base):
    __tablename__ = "product_variants"

    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    size = Column(String(50), nullable=False)
    # Assigned right after the insert because it embeds the row's own id
    sku = Column(String(100), nullable=True, unique=True)

    product = relationship("Product", back_populates="variants")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_variants_price_nonnegative"),
        CheckConstraint("stock >= 0", name="ck_product_variants_stock_nonnegative"),
    )


class ProductImage(IntegerPrimaryKeyMixin, BaseModel, Base):
    __tablename__ = "product_images"

    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(Text, nullable=False)
    image_public_id = Column(String(255), nullable=True)  # object storage key, used for deletion
    display_order = Column(Integer, nullable=False)

    product = relationship("Product", back_populates="images")

    __table_args__ = (
        CheckConstraint(
            f"display_order >= 1 AND display_order <= {MAX_IMAGES}",
            name="ck_product_images_display_order_range",
        ),
    )
