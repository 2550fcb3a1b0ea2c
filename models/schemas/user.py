from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

REQUIRED = {"required": "All fields are required."}


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizingSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class UserSignupSchema(_EmailNormalizingSchema):
    name = fields.String(required=True, validate=validate.Length(min=1), error_messages=REQUIRED)
    email = fields.String(required=True, validate=validate.Length(min=1), error_messages=REQUIRED)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1), error_messages=REQUIRED)


class UserLoginSchema(_EmailNormalizingSchema):
    email = fields.String(required=True, validate=validate.Length(min=1), error_messages=REQUIRED)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1), error_messages=REQUIRED)


class IdentityClaimsSchema(Schema):
    """Identity carried by both token kinds; drops exp/iat/type on dump."""
    userId = fields.String(required=True)
    name = fields.String(required=True)
    email = fields.String(required=True)
