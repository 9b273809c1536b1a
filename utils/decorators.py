from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from services.exceptions import InvalidToken, Unauthorized


def bearer_token() -> str:
    """Return the token from ``Authorization: Bearer <token>`` or raise Unauthorized."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token or " " in token:
        raise Unauthorized("Access Denied: Access token is required!")
    return token


def jwt_required():
    """
    Protect a view with the access token only; the token store is never read
    here. Sets g.current_user_id and g.access_token for the view.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            codec = current_app.extensions["auth_service"].codec
            try:
                claims = codec.verify_access_token(token)
            except InvalidToken:
                raise Unauthorized("Access token is invalid or expired!")

            g.current_user_id = claims.user_id
            g.access_token = token
            g.token_claims = claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator
