"""
Helpers shared by the blueprints: service lookup and the response envelope.

Every JSON response has the shape {"success": bool, "data"?: ..., "message"?: ...}.
"""
from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request

from models.db_storage import DBStorage
from services.account_service import AccountService
from services.auth_service import AuthService
from services.user_service import UserService


def get_storage() -> DBStorage:
    return current_app.extensions["storage"]


def get_auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


def get_user_service() -> UserService:
    return current_app.extensions["user_service"]


def get_account_service() -> AccountService:
    return current_app.extensions["account_service"]


def json_body() -> dict:
    """Request JSON or {} when the body is empty or not JSON; schemas do the rest."""
    payload = request.get_json(silent=True)
    return payload if payload is not None else {}


def success_response(data: Any = None, message: str | None = None, status: int = 200):
    payload = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status
