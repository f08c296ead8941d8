# money_manager/app.py

import logging
import os
from datetime import timedelta

from flask import Flask, jsonify
from flask_cors import CORS

from . import db
from .auth import auth_bp, init_auth
from .errors import register_error_handlers
from .transactions import bp as transactions_bp

# ---------------- Configuration ----------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("money-manager")

DEFAULT_DB_PATH = os.path.join(os.getcwd(), "data", "money_manager.db")


def load_config():
    """Settings read from the environment, with development defaults"""
    return {
        'JWT_SECRET_KEY': os.environ.get('JWT_SECRET_KEY', "dev-only-secret-key-change-me-in-production"),
        'JWT_ACCESS_TOKEN_EXPIRES': timedelta(hours=float(os.environ.get('JWT_EXPIRES_HOURS', 24))),
        'DB_PATH': os.environ.get('DB_PATH', DEFAULT_DB_PATH),
        'CORS_ORIGINS': os.environ.get('CORS_ORIGINS', '*'),
    }


# ---------------- Flask App Factory ----------------
def create_app(config=None):
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    # Tokens only ever travel in the Authorization header
    app.config['JWT_TOKEN_LOCATION'] = ['headers']
    init_auth(app)

    # CORS
    origins = [o.strip() for o in app.config['CORS_ORIGINS'].split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}})

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(transactions_bp)

    register_error_handlers(app)

    # Initialize DB
    db.init_db(app.config['DB_PATH'])
    logger.info(f"Database initialized at {app.config['DB_PATH']}")

    app.teardown_appcontext(db.close_db)

    @app.route('/')
    def root():
        return jsonify({"msg": "Money Manager API is running"})

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app


# ---------------- Run ----------------
if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5001))
    debug = os.environ.get('FLASK_DEBUG', '0') == '1'
    logger.info(f"Starting Money Manager API on port {port}")
    app.run(host='0.0.0.0', port=port, debug=debug)
