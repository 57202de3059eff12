#!/usr/bin/env python3
"""
StudyMate application entry point.

This module selects configuration based on environment variables and creates
the Flask application via `create_app`. When executed directly, it runs the
development server. In production, a WSGI server should import `app` from
this module.

Environment variables of interest:
- FLASK_ENV: 'testing' uses an in-memory DB with stubbed AI replies;
  'production' loads config.prod.env, anything else config.env.
- DATABASE_URL, SECRET_KEY, AI_API_KEY, AI_MODEL: consumed by `create_app`.
"""

import os
import logging
from studymate import create_app

logger = logging.getLogger(__name__)

if os.getenv('FLASK_ENV') == 'testing':
    test_config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': os.getenv('DATABASE_URL', 'sqlite:///:memory:'),
        'SECRET_KEY': os.getenv('SECRET_KEY', 'test-secret-key'),
        'RATELIMIT_ENABLED': False,
    }
    app = create_app(test_config)
    logger.info("Running in TESTING mode with in-memory database")
else:
    app = create_app()

if __name__ == '__main__':
    app.run(debug=os.getenv('FLASK_ENV') != 'production',
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', 5000)))
