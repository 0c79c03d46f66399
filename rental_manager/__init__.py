from flask import Flask, request
from loguru import logger
from werkzeug.exceptions import HTTPException

from .config import Config, setup_logging
from .controllers.api import bp as api_bp
from .controllers.auth import bp as auth_bp
from .controllers.rentals import bp as rentals_bp
from .controllers.views import bp as views_bp
from .models.backend import Backend
from .services.common import current_user
from .utils.filters import fmt_currency, fmt_iso_local
from .utils.responses import server_error


def create_app(config=None, backend=None):
    """
    Build the Flask app. `config` (a class or dict) overrides the environment
    settings; `backend` replaces the handle built from those settings.
    """
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(Config)
    if isinstance(config, dict):
        app.config.update(config)
    elif config is not None:
        app.config.from_object(config)

    setup_logging(app.config["LOG_LEVEL"])

    app.extensions["backend"] = backend or Backend.from_config(app.config)

    app.register_blueprint(auth_bp)
    app.register_blueprint(views_bp)
    app.register_blueprint(rentals_bp)
    app.register_blueprint(api_bp)

    tz_name = app.config["TIMEZONE"]
    app.jinja_env.filters["fmt_iso_local"] = lambda v, use_12h=False: fmt_iso_local(v, tz_name, use_12h)
    app.jinja_env.filters["fmt_currency"] = fmt_currency
    app.jinja_env.globals["current_user"] = current_user

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        if request.path.startswith("/api/"):
            return server_error()
        return "Internal server error", 500

    logger.info(f"App created (env={app.config['APP_ENV']})")
    return app
