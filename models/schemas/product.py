from marshmallow import Schema, fields, validate, post_load, EXCLUDE

from models.product import MAX_PRICE, MAX_STOCK
from services.products import NewProduct, ProductChanges, VariantSpec


class VariantInputSchema(Schema):
    price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0, max=MAX_PRICE))
    stock = fields.Integer(required=True, strict=True, validate=validate.Range(min=0, max=MAX_STOCK))
    size = fields.String(required=True, validate=validate.Length(min=1, max=50))

    @post_load
    def make_spec(self, data, **kwargs):
        return VariantSpec(**data)


class ProductCreateSchema(Schema):
    """Form fields of POST /admin/products; variants and images are read separately."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=2, max=255))
    description = fields.String(load_default="")
    category_id = fields.Integer(required=True, validate=validate.Range(min=1))
    brand_id = fields.Integer(required=True, validate=validate.Range(min=1))

    @post_load
    def make_product(self, data, **kwargs):
        return NewProduct(**data)


class ProductUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(validate=validate.Length(min=2, max=255))
    description = fields.String()
    category_id = fields.Integer(validate=validate.Range(min=0))
    brand_id = fields.Integer(validate=validate.Range(min=0))

    @post_load
    def make_changes(self, data, **kwargs):
        return ProductChanges(**data)


class VariantOutSchema(Schema):
    id = fields.Integer()
    price = fields.Decimal(as_string=True)
    stock = fields.Integer()
    size = fields.String()
    sku = fields.String()


class ImageOutSchema(Schema):
    id = fields.Integer()
    image_url = fields.String()
    display_order = fields.Integer()


class ProductOutSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    slug = fields.String()
    description = fields.String(allow_none=True)
    category_id = fields.Integer()
    brand_id = fields.Integer()
    total_stock = fields.Integer()
    rating_avg = fields.Float()
    review_count = fields.Integer()
    variants = fields.List(fields.Nested(VariantOutSchema))
    images = fields.List(fields.Nested(ImageOutSchema))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
