import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config.settings import Config
from .errors import MenuAnalysisError

logger = logging.getLogger(__name__)


def create_app(config_class=Config, model_client=None, image_store=None, scan_store=None):
    """Application factory pattern

    Capability handles (model client, image store, scan store) are built here
    once from configuration; tests pass fakes instead.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize extensions
    CORS(app)
    config_class.init_app(app)

    from .services.menu_analysis.menu_analysis_service import MenuAnalysisService
    from .services.shared.gemini.gemini_client import init_model_client

    if model_client is None:
        model_client = init_model_client(app.config)
    if image_store is None and app.config.get("IMAGE_BUCKET"):
        from .services.shared.image_store import ImageStore
        image_store = ImageStore(app.config["IMAGE_BUCKET"], region=app.config.get("AWS_REGION"))
    if scan_store is None and app.config.get("SCANS_TABLE"):
        from .services.shared.dynamodb_store import ScanStore
        scan_store = ScanStore(app.config["SCANS_TABLE"], region=app.config.get("AWS_REGION"))

    app.extensions["menu_model"] = model_client
    app.extensions["menu_analysis"] = MenuAnalysisService(
        app.config, model_client=model_client, image_store=image_store, scan_store=scan_store,
    )

    # Register blueprints
    from .routes.analysis import analysis_bp
    from .routes.scans import scans_bp
    from .routes.health import health_bp

    app.register_blueprint(analysis_bp)
    app.register_blueprint(scans_bp)
    app.register_blueprint(health_bp)

    @app.errorhandler(MenuAnalysisError)
    def handle_menu_analysis_error(e: MenuAnalysisError):
        return jsonify(e.to_dict()), e.http_status

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error: %s", e)
        return jsonify({"error": "internal", "msg": "Internal error"}), 500

    return app
