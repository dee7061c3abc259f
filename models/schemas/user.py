from marshmallow import Schema, fields, pre_load, validate, EXCLUDE


def _norm_username(v):
    return v.strip() if isinstance(v, str) else v


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=255))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "username" in data:
            data = dict(data, username=_norm_username(data["username"]))
        return data


class UserLoginSchema(UserCreateSchema):
    pass


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
