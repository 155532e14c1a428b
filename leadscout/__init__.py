"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
from flask import Flask


def create_app():
    """Create and configure the Flask application."""
    from leadscout.config import SECRET_KEY
    from leadscout.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.secret_key = SECRET_KEY

    # ── Blueprints ──────────────────────────────────────────────────────
    from leadscout.routes.health import bp as health_bp
    from leadscout.routes.markets import bp as markets_bp
    from leadscout.routes.ad_platforms import bp as ad_platforms_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(markets_bp)
    app.register_blueprint(ad_platforms_bp)

    # ── Circuit breakers ────────────────────────────────────────────────
    from leadscout.extensions import redis_client
    from leadscout.services.circuit_breaker import init_breakers
    init_breakers(redis_client)

    return app
