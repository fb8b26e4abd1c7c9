from marshmallow import Schema, fields, validate, EXCLUDE


class BrandCreateSchema(Schema):
    # Loaded from multipart form data, which may also carry the logo file
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=2, max=100))
    description = fields.String(load_default="")


class BrandUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(validate=validate.Length(min=2, max=100))
    description = fields.String()


class BrandOutSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    slug = fields.String()
    description = fields.String(allow_none=True)
    logo_url = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
