from flask import Blueprint

from api.common import get_storage, success_response

bp = Blueprint("health", __name__)

VERSION = "1.0.0"


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            success:
              type: boolean
            data:
              type: object
              properties:
                status:
                  type: string
                  example: ok
                version:
                  type: string
                  example: 1.0.0
                database:
                  type: string
                  example: ok
    """
    database = "ok" if get_storage().ping() else "unavailable"
    return success_response({"status": "ok", "version": VERSION, "database": database})
