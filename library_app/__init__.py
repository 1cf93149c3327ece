from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from library_app.config import Config
from library_app.extensions import db, migrate, jwt
from library_app.utils.logging import configure_logging


def _register_error_handlers(app):
    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        app.logger.error("Database error", exc_info=e, extra={"event": "http.database_error"})
        return jsonify({"success": False, "message": "Service unavailable: Database error"}), 503

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code
        app.logger.error("Unhandled error", exc_info=e, extra={"event": "http.unhandled_error"})
        return jsonify({"success": False, "message": "An unexpected error occurred"}), 500


def create_app(config_object=Config, overrides=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    # 1) db first (models need db.engine / db.session)
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    from library_app import models  # noqa: F401  registers every table

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # 2) API blueprints
    from library_app.controllers.auth_controller import auth_bp
    from library_app.controllers.book_controller import book_bp
    from library_app.controllers.checkout_controller import checkout_bp
    from library_app.controllers.review_controller import review_bp
    from library_app.controllers.chat_controller import chat_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(book_bp, url_prefix="/api/books")
    app.register_blueprint(checkout_bp, url_prefix="/api/checkouts")
    app.register_blueprint(review_bp, url_prefix="/api/reviews")
    app.register_blueprint(chat_bp, url_prefix="/api/chat")

    _register_error_handlers(app)

    from library_app.cli import register_commands
    register_commands(app)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    return app
