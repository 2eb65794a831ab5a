"""
Flask application factory.

Creates and configures the app: logging, CORS headers, optional bearer-key
auth, blueprints and collaborator circuit breakers.
"""
import hmac

from flask import Flask, request, jsonify


def create_app():
    """Create and configure the Flask application."""
    from disposition_router.logging_config import configure_logging
    from disposition_router.config import CORS_HEADERS, ROUTER_API_KEY

    app = Flask(__name__)

    configure_logging(app)

    OPEN_PATHS = {'/health'}

    @app.before_request
    def require_api_key():
        if not ROUTER_API_KEY:
            return  # No key set: open access (local dev)
        if request.method == 'OPTIONS' or request.path in OPEN_PATHS:
            return
        supplied = request.headers.get('Authorization', '').removeprefix('Bearer ').strip()
        if not hmac.compare_digest(supplied.encode(), ROUTER_API_KEY.encode()):
            return jsonify({'error': 'Unauthorized'}), 401

    @app.after_request
    def add_cors_headers(response):
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value
        return response

    from disposition_router.routes.disposition import bp as disposition_bp
    from disposition_router.routes.pipeline import bp as pipeline_bp
    from disposition_router.routes.metrics import bp as metrics_bp
    from disposition_router.routes.health import bp as health_bp

    app.register_blueprint(disposition_bp)
    app.register_blueprint(pipeline_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(health_bp)

    from disposition_router.extensions import redis_client
    from disposition_router.services.circuit_breaker import init_breakers
    init_breakers(redis_client)

    # Import models so Base.metadata knows about them.
    # Schema is managed by Alembic: no create_all() call.
    from disposition_router.database import import_models
    import_models()

    return app
