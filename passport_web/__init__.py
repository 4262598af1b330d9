import logging
from flask import Flask
from .config import Config

logger = logging.getLogger("passport-frontend")

def create_app(config_class=Config):
    import os
    base_dir = os.path.dirname(os.path.abspath(__file__))
    app = Flask(__name__,
                template_folder=os.path.join(base_dir, "templates"),
                static_folder=os.path.join(base_dir, "static"))
    app.config.from_object(config_class)

    # Register Blueprints
    from .routes.common import common_bp
    app.register_blueprint(common_bp)

    from .routes.auth import auth_bp
    app.register_blueprint(auth_bp)

    from .routes.dashboard import dashboard_bp
    app.register_blueprint(dashboard_bp)

    from .routes.emergency import emergency_bp
    app.register_blueprint(emergency_bp)

    logger.info(f"Patient passport frontend using API at {app.config['PASSPORT_API_BASE']}")
    return app
