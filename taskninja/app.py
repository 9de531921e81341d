import os

from flask import Flask
from flask_cors import CORS

from taskninja.utils.json_codec import EnvelopeJSONProvider


def create_app(test_config=None, store=None):
    app = Flask(__name__)
    app.json = EnvelopeJSONProvider(app)
    app.config.from_object("taskninja.config.Config")
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Core extensions
    CORS(app, resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}})

    from taskninja.middleware import recover
    from taskninja.middleware.rate_limit import RateLimiter
    from taskninja.utils.db import init_app as init_db
    from taskninja.utils.responses import register_error_handlers

    # Outermost first: recovery boundary, then throttling, then routing
    recover.init_app(app)
    register_error_handlers(app)
    RateLimiter.from_config(app.config).init_app(app)

    init_db(app, store=store)

    # Register blueprints
    from taskninja.routes.health_routes import health_bp
    from taskninja.routes.task_routes import tasks_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(tasks_bp, url_prefix="/tasks")

    if not app.config["LIMITER_ENABLED"]:
        app.logger.info("rate limiter disabled")

    return app


if __name__ == "__main__":
    # Direct run support: python -m taskninja.app
    create_app().run(
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "4000")),
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
    )
