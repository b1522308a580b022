import logging
import logging.handlers
import os

from flask import Flask, render_template, redirect, url_for, flash, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_wtf.csrf import CSRFError
from jwt.exceptions import PyJWTError

from fitchallenge.config import config
from fitchallenge.extensions import db, ma, jwt, migrate, csrf, limiter
from fitchallenge.filters import register_filters
from fitchallenge.models import User
from fitchallenge.utils.decorators import login_redirect


def configure_logging(app):
    """Attach handlers to ``app.logger`` according to LOG_LEVEL / LOG_FILE."""
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.handlers.clear()
    app.logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(log_level)
    app.logger.addHandler(stream_handler)

    log_file = app.config.get('LOG_FILE')
    if log_file:
        os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        app.logger.addHandler(file_handler)

    logging.getLogger('werkzeug').setLevel(logging.WARNING)


def configure_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return render_template("errors/404.html"), 404

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        app.logger.warning("Rate limit exceeded: %s %s from %s",
                           request.method, request.path, request.remote_addr)
        flash("Too many attempts. Please wait a few minutes and try again.", "error")
        return redirect(url_for("auth.login"))

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        flash("Your form expired. Please try again.", "error")
        return redirect(request.referrer or url_for("dashboard.index"))

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error("Unhandled exception on %s: %s", request.path, error, exc_info=True)
        return render_template("errors/500.html"), 500


def configure_jwt(app):
    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        flash("Please log in to continue.", "error")
        return redirect(url_for("auth.login"))

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return login_redirect("Your session has expired. Please log in again.")

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return login_redirect("Please log in to continue.")

    @app.context_processor
    def inject_user():
        try:
            verify_jwt_in_request(optional=True)
            identity = get_jwt_identity()
            if identity:
                return dict(current_user=db.session.get(User, int(identity)))
        except (JWTExtendedException, PyJWTError):
            pass
        return dict(current_user=None)


def create_app(config_name=None):
    app = Flask(__name__)

    # Settings
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    app.config.from_object(config[config_name])
    for key in app.config.get('REQUIRED_SETTINGS', ()):
        if not app.config.get(key):
            raise RuntimeError(f"{key} must be set for the '{config_name}' configuration")

    configure_logging(app)

    # Extensions
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    configure_jwt(app)
    configure_error_handlers(app)
    register_filters(app)

    @app.after_request
    def log_request(response):
        app.logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    # Blueprints
    from fitchallenge.routes.auth import auth_bp
    from fitchallenge.routes.dashboard import dashboard_bp
    from fitchallenge.routes.profile import profile_bp
    from fitchallenge.routes.challenges import challenges_bp
    from fitchallenge.routes.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(profile_bp, url_prefix="/profile")
    app.register_blueprint(challenges_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")

    from fitchallenge.commands import register_commands
    register_commands(app)

    return app
