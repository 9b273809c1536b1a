from marshmallow import Schema, fields, pre_load, validate, validates

from models.schemas.common import (
    validate_not_blank,
    validate_not_future,
    validate_password_strength,
)


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class UserCreateSchema(Schema):
    username = fields.String(
        required=True,
        data_key="userName",
        validate=[validate.Length(min=3, max=64), validate.Regexp(r"^[A-Za-z0-9_.-]+$")],
    )
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.String(required=True, load_only=True)
    full_name = fields.String(required=True, data_key="fullName", validate=validate.Length(min=1, max=255))
    date_of_birth = fields.Date(required=True, data_key="dateOfBirth")
    phone_number = fields.String(required=True, data_key="phoneNumber", validate=validate.Length(min=1, max=32))
    address = fields.String(required=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if "userName" in data:
                data["userName"] = _strip(data["userName"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        validate_password_strength(value)

    @validates("full_name")
    def validate_full_name(self, value, **kwargs):
        validate_not_blank(value)

    @validates("date_of_birth")
    def validate_date_of_birth(self, value, **kwargs):
        validate_not_future(value)


class UserLoginSchema(Schema):
    username_or_email = fields.String(
        required=True, data_key="usernameOrEmail", validate=validate.Length(min=1)
    )
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "usernameOrEmail" in data:
            data = dict(data)
            data["usernameOrEmail"] = _strip(data["usernameOrEmail"])
        return data


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate.Length(min=1))


class LogoutSchema(Schema):
    refresh_token = fields.String(data_key="refreshToken", validate=validate.Length(min=1))


class UserUpdateSchema(Schema):
    username = fields.String(
        data_key="userName",
        validate=[validate.Length(min=3, max=64), validate.Regexp(r"^[A-Za-z0-9_.-]+$")],
    )
    email = fields.Email(validate=validate.Length(max=255))
    full_name = fields.String(data_key="fullName", validate=validate.Length(min=1, max=255))
    date_of_birth = fields.Date(data_key="dateOfBirth")
    phone_number = fields.String(data_key="phoneNumber", validate=validate.Length(min=1, max=32))
    address = fields.String(validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if "userName" in data:
                data["userName"] = _strip(data["userName"])
        return data

    @validates("full_name")
    def validate_full_name(self, value, **kwargs):
        validate_not_blank(value)

    @validates("date_of_birth")
    def validate_date_of_birth(self, value, **kwargs):
        validate_not_future(value)


class PasswordChangeSchema(Schema):
    old_password = fields.String(required=True, load_only=True, data_key="oldPassword")
    new_password = fields.String(required=True, load_only=True, data_key="newPassword")

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        validate_password_strength(value)


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String(data_key="userName")
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    date_of_birth = fields.Date(data_key="dateOfBirth")
    phone_number = fields.String(data_key="phoneNumber")
    address = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
