from __future__ import annotations

from flask import Blueprint, g

from api.common import get_account_service, json_body, success_response
from models.schemas.account import AccountCreateSchema, AccountOutSchema, AccountUpdateSchema
from utils.decorators import jwt_required

bp = Blueprint("accounts", __name__)

create_schema = AccountCreateSchema()
update_schema = AccountUpdateSchema()
out_schema = AccountOutSchema()
out_list_schema = AccountOutSchema(many=True)


@bp.get("/accounts")
@jwt_required()
def list_accounts():
    """
    List the current user's accounts (oldest first)
    ---
    tags: [Accounts]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    rows = get_account_service().list_for_user(g.current_user_id)
    return success_response(out_list_schema.dump(rows))


@bp.post("/accounts")
@jwt_required()
def create_account():
    """
    Create an account for the current user
    ---
    tags: [Accounts]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name]
          properties:
            name: { type: string, maxLength: 128 }
            accountType: { type: string, enum: [cash, bank, credit, savings, investment, other] }
            totalBalance: { type: string, example: "100.00" }
            currency: { type: string, default: USD }
            description: { type: string }
            isActive: { type: boolean, default: true }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    data = create_schema.load(json_body())
    account = get_account_service().create(g.current_user_id, data)
    return success_response(out_schema.dump(account), status=201)


@bp.get("/accounts/<account_id>")
@jwt_required()
def get_account(account_id: str):
    """
    Get one of the current user's accounts
    ---
    tags: [Accounts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: account_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    account = get_account_service().get_for_user(g.current_user_id, account_id)
    return success_response(out_schema.dump(account))


@bp.patch("/accounts/<account_id>")
@jwt_required()
def update_account(account_id: str):
    """
    Update an account (partial)
    ---
    tags: [Accounts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: account_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200: { description: OK }
      400: { description: Validation error }
      404: { description: Not found }
    """
    data = update_schema.load(json_body())
    account = get_account_service().update(g.current_user_id, account_id, data)
    return success_response(out_schema.dump(account))


@bp.delete("/accounts/<account_id>")
@jwt_required()
def delete_account(account_id: str):
    """
    Delete an account
    ---
    tags: [Accounts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: account_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
    """
    get_account_service().delete(g.current_user_id, account_id)
    return success_response(message="Account deleted successfully")
