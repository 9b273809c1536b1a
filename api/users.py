from __future__ import annotations

from flask import Blueprint, g

from api.common import get_account_service, get_user_service, json_body, success_response
from models.schemas.account import AccountOutSchema
from models.schemas.user import PasswordChangeSchema, UserOutSchema, UserUpdateSchema
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
password_change_schema = PasswordChangeSchema()
user_out_schema = UserOutSchema()
account_out_schema = AccountOutSchema()


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get current user profile and primary account.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: User no longer exists
    """
    user = get_user_service().get_profile(g.current_user_id)
    account = get_account_service().primary_account(user.id)
    return success_response(
        {
            "user": user_out_schema.dump(user),
            "account": account_out_schema.dump(account) if account else None,
        }
    )


@bp.patch("/users/me")
@jwt_required()
def update_me():
    """
    Update current user profile (partial)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            userName: { type: string }
            email: { type: string }
            fullName: { type: string }
            dateOfBirth: { type: string, format: date }
            phoneNumber: { type: string }
            address: { type: string }
    responses:
      200: { description: OK }
      400: { description: Validation error or username/email already in use }
      401: { description: Unauthorized }
    """
    data = user_update_schema.load(json_body())
    user = get_user_service().update_profile(g.current_user_id, data)
    return success_response({"user": user_out_schema.dump(user)})


@bp.put("/users/me/password")
@jwt_required()
def change_password():
    """
    Change password; every session of the user is revoked
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [oldPassword, newPassword]
          properties:
            oldPassword: { type: string }
            newPassword: { type: string, minLength: 8 }
    responses:
      200: { description: Password changed }
      400: { description: Validation error or old password incorrect }
      401: { description: Unauthorized }
    """
    data = password_change_schema.load(json_body())
    get_user_service().change_password(g.current_user_id, data["old_password"], data["new_password"])
    return success_response(message="Password changed successfully")
