from flask import Flask, g, request
from flasgger import Swagger
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import hmac
import logging
import uuid
from sqlalchemy.exc import SQLAlchemyError

from .config import get_config
from .errors import register_error_handlers
from models.db_storage import DBStorage
from services.account_service import AccountService
from services.auth_service import AuthService
from services.exceptions import ConfigurationError, Forbidden
from services.settings import AuthSettings
from services.user_service import UserService
from utils.security import Argon2PasswordHasher, TokenCodec

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Personal Finance API",
        "version": "1.0.0",
        "description": "REST API for personal finance tracking: authentication, sessions, profiles and accounts.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def _build_services(app: Flask, hasher=None, clock=None) -> None:
    """
    Wire storage, codec and services from the loaded config and park them in
    app.extensions. Raises ConfigurationError when the service cannot run.
    """
    settings = AuthSettings.from_mapping(app.config)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQLALCHEMY_ECHO", False))
    try:
        storage.reload()
    except SQLAlchemyError as exc:
        logger.critical("Database unavailable at startup: %s", exc.__class__.__name__)
        raise ConfigurationError("Database is unreachable") from exc

    if hasher is None:
        hasher = Argon2PasswordHasher(**(app.config.get("ARGON2_PARAMS") or {}))
    codec = TokenCodec(settings, clock=clock) if clock else TokenCodec(settings)

    accounts = AccountService(storage)
    auth = AuthService(storage, codec, hasher, accounts)
    app.extensions["storage"] = storage
    app.extensions["account_service"] = accounts
    app.extensions["auth_service"] = auth
    app.extensions["user_service"] = UserService(storage, hasher, auth)


def _init_rate_limiting(app: Flask) -> Limiter:
    """Per-client request budget on /api routes; /health stays unmetered."""
    limiter = Limiter(
        get_remote_address,
        app=app,
        application_limits=[app.config["RATELIMIT_APPLICATION"]],
        storage_uri=app.config["RATELIMIT_STORAGE_URI"],
    )

    @limiter.request_filter
    def unmetered():
        return not request.path.startswith(API_PREFIX) or request.path == f"{API_PREFIX}/health"

    return limiter


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.before_request
    def check_api_key():
        expected = app.config.get("API_KEY")
        if not expected or not request.path.startswith("/api"):
            return None
        supplied = request.headers.get("x-api-key", "")
        if not hmac.compare_digest(supplied.encode(), expected.encode()):
            logger.warning("Rejected request %s: bad API key", g.request_id)
            raise Forbidden("Forbidden: Invalid API key")
        return None

    @app.after_request
    def add_request_id(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        return response


def create_app(config_name: str | None = None, config_overrides: dict | None = None,
               hasher=None, clock=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    ``config_overrides`` is applied on top of the selected config class;
    ``hasher`` and ``clock`` replace the password hasher and the token clock
    (tests use both).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if config_overrides:
        app.config.update(config_overrides)

    # Missing secrets or an unreachable database stop the process here
    _build_services(app, hasher=hasher, clock=clock)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)
    _register_request_hooks(app)
    _init_rate_limiting(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .accounts import bp as accounts_bp

    app.register_blueprint(health_bp, url_prefix=API_PREFIX)
    app.register_blueprint(auth_bp, url_prefix=API_PREFIX)
    app.register_blueprint(users_bp, url_prefix=API_PREFIX)
    app.register_blueprint(accounts_bp, url_prefix=API_PREFIX)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        app.extensions["storage"].close()

    @app.route("/")
    def root():
        return {
            "success": True,
            "message": "Personal Finance API is running",
            "data": {"docs": "/apidocs/", "health": f"{API_PREFIX}/health"},
        }, 200

    return app
