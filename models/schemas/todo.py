from marshmallow import Schema, fields, validate, EXCLUDE


class TodoCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=validate.Length(min=1))


class TodoUpdateSchema(Schema):
    # Owner and id are never taken from the body; anything else unknown is dropped
    class Meta:
        unknown = EXCLUDE

    content = fields.String(validate=validate.Length(min=1))
    completed = fields.Boolean()


class TodoOutSchema(Schema):
    id = fields.String()
    user_id = fields.String(data_key="userId")
    content = fields.String()
    completed = fields.Boolean()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
