"""
HealthAI – Flask Application Factory
Serves the clinical-assistant REST API: OCR, LLM completion,
prescription generation/validation and patient records.
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from healthai.config import Config
from healthai.container import EXTENSION_KEY, build_services
from healthai.database import db
from healthai.errors import HealthAIError
from healthai.routes.clinicians import clinicians_bp
from healthai.routes.llm import llm_bp
from healthai.routes.ocr import ocr_bp
from healthai.routes.patients import patients_bp
from healthai.routes.prescription import prescription_bp
from healthai.routes.visits import visits_bp
from healthai.middleware.audit_logger import audit_after_request

limiter = Limiter(key_func=get_remote_address, default_limits=[Config.RATE_LIMIT_DEFAULT])

logger = logging.getLogger("healthai")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(config=Config) -> Flask:
    config.validate()
    _configure_logging(config.LOG_LEVEL)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.FLASK_SECRET_KEY
    app.config["SQLALCHEMY_DATABASE_URI"] = config.DATABASE_URL
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["DEBUG"] = config.APP_ENV == "development"
    app.config["RATELIMIT_ENABLED"] = config.APP_ENV != "testing"

    # Extensions
    CORS(app)
    limiter.init_app(app)
    db.init_app(app)

    # Create tables if they don't already exist
    with app.app_context():
        from healthai.models import models as _models  # noqa: F401 – ensure all models are registered
        db.create_all()

    app.extensions[EXTENSION_KEY] = build_services(config)

    # Middleware
    app.after_request(audit_after_request)

    # Blueprints
    app.register_blueprint(ocr_bp, url_prefix="/ocr")
    app.register_blueprint(llm_bp, url_prefix="/llm")
    app.register_blueprint(prescription_bp, url_prefix="/api/prescriptions")
    app.register_blueprint(patients_bp, url_prefix="/patients")
    app.register_blueprint(clinicians_bp, url_prefix="/clinicians")
    app.register_blueprint(visits_bp, url_prefix="/visits")

    @app.errorhandler(HealthAIError)
    def handle_service_error(exc: HealthAIError):
        if exc.http_status >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        else:
            logger.warning("%s: %s", type(exc).__name__, exc.message)
        return jsonify({"error": exc.public_message}), exc.http_status

    # Health check
    @app.route("/api/health")
    def health():
        return {"status": "ok", "service": "healthai"}

    return app
