from marshmallow import Schema, fields, validate, validates

from models.schemas.common import to_decimal_2, validate_not_blank

ACCOUNT_TYPES = ("cash", "bank", "credit", "savings", "investment", "other")


class AccountCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=128))
    account_type = fields.String(
        data_key="accountType", load_default="cash", validate=validate.OneOf(ACCOUNT_TYPES)
    )
    total_balance = fields.Decimal(data_key="totalBalance", load_default=0, places=2)
    currency = fields.String(load_default="USD", validate=validate.Length(min=1, max=8))
    description = fields.String(allow_none=True)
    is_active = fields.Boolean(data_key="isActive", load_default=True)

    @validates("name")
    def _validate_name(self, value, **kwargs):
        validate_not_blank(value)

    @validates("total_balance")
    def _validate_balance(self, value, **kwargs):
        to_decimal_2(value)


class AccountUpdateSchema(Schema):
    # All optional, but validate if present
    name = fields.String(validate=validate.Length(min=1, max=128))
    account_type = fields.String(data_key="accountType", validate=validate.OneOf(ACCOUNT_TYPES))
    total_balance = fields.Decimal(data_key="totalBalance", places=2)
    currency = fields.String(validate=validate.Length(min=1, max=8))
    description = fields.String(allow_none=True)
    is_active = fields.Boolean(data_key="isActive")

    @validates("name")
    def _validate_name(self, value, **kwargs):
        validate_not_blank(value)

    @validates("total_balance")
    def _validate_balance(self, value, **kwargs):
        to_decimal_2(value)


class AccountOutSchema(Schema):
    id = fields.String()
    user_id = fields.String(data_key="userId")
    name = fields.String()
    account_type = fields.String(data_key="accountType")
    total_balance = fields.Decimal(data_key="totalBalance", as_string=True, places=2)
    currency = fields.String()
    description = fields.String(allow_none=True)
    is_active = fields.Boolean(data_key="isActive")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
