"""
StudyMate Application Package

FLOW OVERVIEW
- create_app(test_config=None)
  • Build Flask app, apply env-based config then the optional test overrides, init DB.
  • Register blueprints: analyze/cards/match (/api), auth (/api/auth), main (/).
  • Register global error handlers and request logging, create tables.
"""

import logging
from flask import Flask
from .models import db
from .routes import analyze_bp, auth_bp, cards_bp, main_bp, match_bp
from .config import Config


def create_app(test_config=None):
    """Application factory pattern for production deployment"""
    app = Flask(__name__)

    # Configuration
    app.config.from_object(Config())
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Initialize extensions
    db.init_app(app)

    # Register blueprints
    app.register_blueprint(analyze_bp, url_prefix='/api')
    app.register_blueprint(cards_bp, url_prefix='/api')
    app.register_blueprint(match_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(main_bp)

    # Register error handlers and request logging
    from .utils.error_handlers import register_error_handlers
    from .utils.request_logger import register_request_logging
    register_error_handlers(app)
    register_request_logging(app)

    with app.app_context():
        db.create_all()

    return app
