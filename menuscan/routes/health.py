import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)


@health_bp.get("/health")
def health():
    """Health check endpoint"""
    return {"ok": True}, 200


@health_bp.get("/ai-health")
def ai_health():
    """AI capability check: reports whether the model client was initialized at startup."""
    try:
        model = current_app.extensions.get("menu_model")
        status = {
            "aiAvailable": model is not None and callable(getattr(model, "generate", None)),
            "aiInitialized": model is not None,
            "model": getattr(model, "model", None) or current_app.config.get("DEFAULT_MODEL"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        logger.info("AI health check: %s", status)
        return status, 200
    except Exception as e:
        logger.error("AI health check failed: %s", e)
        return {
            "aiAvailable": False,
            "aiInitialized": False,
            "error": str(e),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }, 200
