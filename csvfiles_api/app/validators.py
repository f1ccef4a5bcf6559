from __future__ import annotations

from marshmallow import Schema, fields, validate


class UserUpdateSchema(Schema):
    email = fields.Email(required=True)
    name = fields.String(required=True, validate=validate.Length(min=1))


class UserSchema(UserUpdateSchema):
    id = fields.Integer(required=True, strict=True)
