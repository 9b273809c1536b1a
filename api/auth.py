"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout
- GET  /auth/verify

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues access tokens and longer-lived refresh tokens (JWTs, two secrets)
- Stores each issued pair in a TokenRecord so refresh tokens can be revoked and rotated
- register, login and refresh-token are public; the rest go through jwt_required
"""
from __future__ import annotations

from flask import Blueprint, g

from api.common import get_auth_service, json_body, success_response
from models.schemas.account import AccountOutSchema
from models.schemas.user import (
    LogoutSchema,
    RefreshTokenSchema,
    UserCreateSchema,
    UserLoginSchema,
    UserOutSchema,
)
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()
refresh_schema = RefreshTokenSchema()
logout_schema = LogoutSchema()
user_out_schema = UserOutSchema()
account_out_schema = AccountOutSchema()


@bp.post("/auth/register")
def register():
    """
    Register a new user and provision a zero-balance account.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [userName, email, password, fullName, dateOfBirth, phoneNumber, address]
          properties:
            userName: { type: string }
            email: { type: string }
            password: { type: string, minLength: 8 }
            fullName: { type: string }
            dateOfBirth: { type: string, format: date }
            phoneNumber: { type: string }
            address: { type: string }
    responses:
      201:
        description: Created (returns user, account and an access token)
      400:
        description: Validation error or username/email already in use
    """
    data = user_create_schema.load(json_body())
    result = get_auth_service().register(data)
    return success_response(
        {
            "user": user_out_schema.dump(result.user),
            "account": account_out_schema.dump(result.account),
            "token": result.access_token,
        },
        message="User created successfully",
        status=201,
    )


@bp.post("/auth/login")
def login():
    """
    Login: return access and refresh tokens
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           required: [usernameOrEmail, password]
           properties:
             usernameOrEmail: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens, user and account)
      400:
        description: Validation error
      401:
        description: Invalid credentials
    """
    data = user_login_schema.load(json_body())
    result = get_auth_service().login(data["username_or_email"], data["password"])
    return success_response(
        {
            "accessToken": result.access_token,
            "refreshToken": result.refresh_token,
            "user": user_out_schema.dump(result.user),
            "account": account_out_schema.dump(result.account) if result.account else None,
        }
    )


@bp.post("/auth/refresh-token")
def refresh_token():
    """
    Exchange a refresh token for a new access/refresh pair (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (the old refresh token is no longer usable)
      401:
        description: Refresh token invalid, expired, revoked or already used
    """
    data = refresh_schema.load(json_body())
    pair = get_auth_service().refresh_access_token(data["refresh_token"])
    return success_response({"accessToken": pair.access_token, "refreshToken": pair.refresh_token})


@bp.post("/auth/logout")
@jwt_required()
def logout():
    """
    Logout: revoke the session of the presented access token, also after it was rotated
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refreshToken: { type: string, description: "also revoke the session holding this refresh token" }
    responses:
      200:
        description: Logged out (also when the session was already revoked)
      401:
        description: Unauthorized
    """
    data = logout_schema.load(json_body())
    auth = get_auth_service()
    auth.logout(g.access_token, user_id=g.current_user_id, session_id=g.token_claims.session_id)
    if data.get("refresh_token"):
        auth.logout(data["refresh_token"], user_id=g.current_user_id)
    return success_response(message="Logged out successfully")


@bp.get("/auth/verify")
@jwt_required()
def verify():
    """
    Resolve the presented access token to the current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Token invalid or user no longer exists
    """
    user = get_auth_service().verify_token(g.access_token)
    return success_response({"user": user_out_schema.dump(user)})
