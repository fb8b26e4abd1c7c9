from marshmallow import Schema, fields, pre_load, validate

from models.user import Role

# E.164: "+" followed by up to 15 digits, no leading zero; empty means "not given"
E164_OR_EMPTY = validate.Regexp(r"^(\+[1-9]\d{1,14})?$", error="Phone must be in E.164 format, e.g. +84901234567.")


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class RegisterSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6, max=32))
    full_name = fields.String(required=True, validate=validate.Length(min=2, max=100))
    phone = fields.String(load_default="", validate=E164_OR_EMPTY)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    full_name = fields.String()
    phone = fields.String(allow_none=True)
    role = fields.Enum(Role, by_value=True)
    avatar_url = fields.String(allow_none=True)
    created_at = fields.DateTime()


class LoginOutSchema(Schema):
    access_token = fields.String()
    refresh_token = fields.String()
    expires_in = fields.Integer()
    user = fields.Nested(UserOutSchema)
