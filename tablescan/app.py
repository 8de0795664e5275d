import os
import logging
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config

# Configure logging
logging.basicConfig(level=logging.DEBUG)


def create_app(config=None):
    """Application factory pattern"""
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    app.secret_key = app.config["SECRET_KEY"]
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    from .routes import register_routes
    register_routes(app)

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
